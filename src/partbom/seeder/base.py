import logging
from abc import ABC, abstractmethod
from typing import Optional

from faker import Faker
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class BaseSeeder(ABC):
    """
    One unit of demo data for the part registry and BOM graph.

    Seeders write through the part and BOM services, so generated data obeys
    the same uniqueness and acyclicity rules and leaves audit entries.

    Attributes:
        priority (int): Lower runs first. The sample cart assembly uses 500;
                        generated graphs that build on it use 600+.
        optional (bool): Skipped by `SeederRegistry.run_all` unless its class
                         name is passed in `include`.
    """
    priority: int = 500
    optional: bool = False

    def __init__(self, session: Session, fake: Optional[Faker] = None):
        self.session = session
        self.fake = fake or Faker()

    @abstractmethod
    def run(self):
        """Stage parts and links in `self.session`; the registry commits."""

    def log(self, message: str):
        logger.info(f"[{self.__class__.__name__}] {message}")
