import logging
from typing import Iterable, List, Optional, Type

from faker import Faker
from sqlalchemy.orm import Session

from .base import BaseSeeder

logger = logging.getLogger(__name__)


class SeederRegistry:
    """Known seeders, run lowest priority first by `partbom seed` and `init-db --seed`."""

    _seeders: List[Type[BaseSeeder]] = []

    @classmethod
    def register(cls, seeder_cls: Type[BaseSeeder]):
        if seeder_cls not in cls._seeders:
            cls._seeders.append(seeder_cls)
        return seeder_cls

    @classmethod
    def _ordered(cls) -> List[Type[BaseSeeder]]:
        return sorted(cls._seeders, key=lambda s: s.priority)

    @classmethod
    def names(cls) -> List[str]:
        return [s.__name__ for s in cls._ordered()]

    @classmethod
    def run_all(
        cls,
        session: Session,
        include: Optional[Iterable[str]] = None,
        fake: Optional[Faker] = None,
    ) -> List[str]:
        """
        Run the default seeders plus any optional ones named in `include`.

        Each seeder's parts, links and audit entries are committed together.
        A seeder that raises (e.g. a duplicate part number in its data file)
        is rolled back and the error propagates; earlier seeders stay committed.

        Returns the class names that completed.
        """
        fake = fake or Faker()
        requested = set(include or ())
        selected = [s for s in cls._ordered() if not s.optional or s.__name__ in requested]

        logger.info(f"Seeding BOM demo data with {len(selected)} seeder(s).")

        completed: List[str] = []
        for position, seeder_cls in enumerate(selected, 1):
            seeder = seeder_cls(session, fake)
            seeder.log(f"Running ({position}/{len(selected)})...")
            try:
                seeder.run()
                session.commit()
            except Exception as exc:
                session.rollback()
                logger.error(f"Seeder {seeder_cls.__name__} failed: {exc}")
                raise
            seeder.log("Completed.")
            completed.append(seeder_cls.__name__)
        return completed
