"""
Identifier sequences for parts, part numbers and audit entries.

Each family keeps an explicit counter in `id_sequences`. The counter is
re-derived from existing records the first time a family is used (and on
`sync_from_records()` at start-up), and only ever moves forward, so a number
that was issued or stored once is never handed out again.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from partbom.models.audit import AuditLog
from partbom.models.part import Part
from partbom.models.sequence import IdSequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SequenceFamily:
    name: str
    prefix: str
    width: int

    @property
    def pattern(self) -> re.Pattern:
        return re.compile(rf"^{re.escape(self.prefix)}(\d+)$")

    def format(self, value: int) -> str:
        return f"{self.prefix}{value:0{self.width}d}"

    def parse(self, identifier: Optional[str]) -> Optional[int]:
        if not identifier:
            return None
        match = self.pattern.match(identifier)
        if not match:
            return None
        return int(match.group(1))


PART_ID = SequenceFamily("PART", "PART-", 4)
PART_NUMBER = SequenceFamily("PRT", "PRT-", 6)
AUDIT_ID = SequenceFamily("AUD", "AUD-", 6)

FAMILIES: Dict[str, SequenceFamily] = {
    family.name: family for family in (PART_ID, PART_NUMBER, AUDIT_ID)
}


class SequenceService:
    def __init__(self, session: Session):
        self.session = session

    def _existing_identifiers(self, family: SequenceFamily) -> Iterable[str]:
        like = f"{family.prefix}%"
        if family is PART_ID:
            rows = self.session.query(Part.id).filter(Part.id.like(like))
        elif family is PART_NUMBER:
            rows = self.session.query(Part.part_number).filter(
                Part.part_number.like(like)
            )
        else:
            rows = self.session.query(AuditLog.id).filter(AuditLog.id.like(like))
        return (row[0] for row in rows)

    def _derive_next_value(self, family: SequenceFamily) -> int:
        highest = 0
        for identifier in self._existing_identifiers(family):
            value = family.parse(identifier)
            if value is not None and value > highest:
                highest = value
        return highest + 1

    def _get_row(self, family: SequenceFamily) -> IdSequence:
        row = (
            self.session.query(IdSequence)
            .filter(IdSequence.name == family.name)
            .with_for_update()
            .first()
        )
        if row is None:
            row = IdSequence(name=family.name, next_value=self._derive_next_value(family))
            self.session.add(row)
            self.session.flush()
        return row

    def peek(self, family: SequenceFamily) -> int:
        return self._get_row(family).next_value

    def advance_past(self, family: SequenceFamily, identifier: str) -> None:
        """Move the counter beyond `identifier` if it belongs to this family."""
        value = family.parse(identifier)
        if value is None:
            return
        row = self._get_row(family)
        if value + 1 > row.next_value:
            row.next_value = value + 1
            self.session.flush()

    def allocate(
        self,
        family: SequenceFamily,
        exists: Optional[Callable[[str], bool]] = None,
    ) -> str:
        """
        Issue the next identifier of `family`.

        Candidates for which `exists` returns True are skipped (and burned).
        """
        row = self._get_row(family)
        while True:
            candidate = family.format(row.next_value)
            row.next_value += 1
            if exists is None or not exists(candidate):
                break
        self.session.flush()
        return candidate

    def sync_from_records(self) -> Dict[str, int]:
        """Re-derive every counter from stored records; counters never move back."""
        result: Dict[str, int] = {}
        for family in FAMILIES.values():
            row = self._get_row(family)
            derived = self._derive_next_value(family)
            if derived > row.next_value:
                logger.info(
                    f"Sequence {family.name} advanced from {row.next_value} to {derived}"
                )
                row.next_value = derived
            result[family.name] = row.next_value
        self.session.flush()
        return result
