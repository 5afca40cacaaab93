from __future__ import annotations

from sqlalchemy import Column, Integer, String

from partbom.models.base import Base


class IdSequence(Base):
    """
    Persisted high-water mark for one identifier family (PART, PRT, AUD).

    `next_value` is the smallest number that has never been issued or stored.
    """

    __tablename__ = "id_sequences"

    name = Column(String(32), primary_key=True)
    next_value = Column(Integer, nullable=False, default=1)
