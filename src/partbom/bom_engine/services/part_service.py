"""
Part registry.

Owns part identity, part-number uniqueness/allocation and part attribute
updates. `require_part()` is the single existence check used by the BOM and
tree services.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from partbom.bom_engine.schemas.part_bom import (
    AuditLogEntry,
    ChildPartUsage,
    PartDetails,
    PartSearchFilters,
    PartSummary,
)
from partbom.bom_engine.services.audit_service import AuditService
from partbom.bom_engine.services.sequence_service import (
    PART_ID,
    PART_NUMBER,
    SequenceService,
)
from partbom.exceptions import ConflictError, NotFoundError, ValidationError
from partbom.models.audit import AuditAction
from partbom.models.part import BOMLink, Part

logger = logging.getLogger(__name__)


def normalize_part_number(value: Optional[str]) -> str:
    return (value or "").strip().upper()


def _like_pattern(value: Optional[str]) -> Optional[str]:
    """Substring pattern for ilike; `%`, `_` and `\\` in the input match literally."""
    text = (value or "").strip()
    if not text:
        return None
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def to_part_summary(part: Part) -> PartSummary:
    return PartSummary(id=part.id, part_number=part.part_number, name=part.name)


class PartService:
    def __init__(
        self,
        session: Session,
        sequences: Optional[SequenceService] = None,
        audit: Optional[AuditService] = None,
    ):
        self.session = session
        self.sequences = sequences or SequenceService(session)
        self.audit = audit or AuditService(session, self.sequences)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def require_part(self, part_id: str) -> Part:
        part = self.session.get(Part, part_id) if part_id else None
        if part is None:
            raise NotFoundError(f"Part '{part_id}' was not found.", resource="part")
        return part

    def get_by_part_number(self, part_number: str) -> Optional[Part]:
        return (
            self.session.query(Part)
            .filter(Part.part_number == normalize_part_number(part_number))
            .first()
        )

    def _part_number_in_use(self, part_number: str) -> bool:
        return (
            self.session.query(Part.id).filter(Part.part_number == part_number).first()
            is not None
        )

    def _assert_part_number_available(self, part_number: str) -> None:
        if self._part_number_in_use(part_number):
            raise ConflictError(
                f"Part number '{part_number}' already exists.",
                part_number=part_number,
            )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_part(
        self,
        name: Optional[str],
        part_number: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Part:
        normalized_name = (name or "").strip()
        if not normalized_name:
            raise ValidationError("Part name is required.", field="name")

        requested_number = normalize_part_number(part_number)
        if requested_number:
            self._assert_part_number_available(requested_number)
            number = requested_number
        else:
            number = self.sequences.allocate(PART_NUMBER, exists=self._part_number_in_use)

        now = datetime.utcnow()
        part = Part(
            id=self.sequences.allocate(
                PART_ID, exists=lambda pid: self.session.get(Part, pid) is not None
            ),
            part_number=number,
            name=normalized_name,
            description=(description or "").strip(),
            created_at=now,
            updated_at=now,
        )
        self.session.add(part)
        self.session.flush()
        self.sequences.advance_past(PART_NUMBER, part.part_number)

        self.audit.record(
            part.id,
            AuditAction.PART_CREATED,
            f"Part {part.part_number} was created.",
            {"name": part.name},
        )
        logger.info(f"Created part {part.id} ({part.part_number})")
        return part

    def update_part(
        self,
        part_id: str,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        part_number: Optional[str] = None,
    ) -> Part:
        if name is None and description is None and part_number is None:
            raise ValidationError("At least one field must be provided for update.")

        part = self.require_part(part_id)

        next_name = name.strip() if name is not None else part.name
        if not next_name:
            raise ValidationError("Part name cannot be empty.", field="name")

        next_description = (
            description.strip() if description is not None else part.description
        )

        next_number = part.part_number
        if part_number is not None:
            normalized = normalize_part_number(part_number)
            if not normalized:
                raise ValidationError(
                    "Part number cannot be empty when provided.", field="part_number"
                )
            if normalized != part.part_number:
                self._assert_part_number_available(normalized)
            next_number = normalized

        part.name = next_name
        part.description = next_description
        part.part_number = next_number
        part.updated_at = datetime.utcnow()
        self.session.flush()
        self.sequences.advance_past(PART_NUMBER, part.part_number)

        self.audit.record(
            part.id,
            AuditAction.PART_UPDATED,
            f"Part {part.part_number} was updated.",
            {"name": part.name},
        )
        logger.info(f"Updated part {part.id} ({part.part_number})")
        return part

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def search_parts(
        self,
        filters: Optional[PartSearchFilters] = None,
        *,
        part_number: Optional[str] = None,
        name: Optional[str] = None,
        q: Optional[str] = None,
    ) -> List[PartSummary]:
        """
        Case-insensitive substring search; supplied filters are ANDed and
        `q` matches either name or part number. Sorted by part number.
        """
        if filters is not None:
            part_number = filters.part_number if part_number is None else part_number
            name = filters.name if name is None else name
            q = filters.q if q is None else q

        query = self.session.query(Part)

        by_number = _like_pattern(part_number)
        if by_number:
            query = query.filter(Part.part_number.ilike(by_number, escape="\\"))
        by_name = _like_pattern(name)
        if by_name:
            query = query.filter(Part.name.ilike(by_name, escape="\\"))
        by_any = _like_pattern(q)
        if by_any:
            query = query.filter(
                or_(
                    Part.name.ilike(by_any, escape="\\"),
                    Part.part_number.ilike(by_any, escape="\\"),
                )
            )

        parts = query.order_by(Part.part_number.asc()).all()
        return [to_part_summary(p) for p in parts]

    def get_part_details(self, part_id: str) -> PartDetails:
        part = self.require_part(part_id)

        parent_rows = (
            self.session.query(Part)
            .join(BOMLink, BOMLink.parent_id == Part.id)
            .filter(BOMLink.child_id == part.id)
            .order_by(Part.part_number.asc())
            .all()
        )
        child_rows = (
            self.session.query(Part, BOMLink.quantity)
            .join(BOMLink, BOMLink.child_id == Part.id)
            .filter(BOMLink.parent_id == part.id)
            .order_by(Part.part_number.asc())
            .all()
        )

        parent_parts = [to_part_summary(p) for p in parent_rows]
        child_parts = [
            ChildPartUsage(
                id=child.id,
                part_number=child.part_number,
                name=child.name,
                quantity=quantity,
            )
            for child, quantity in child_rows
        ]

        return PartDetails(
            id=part.id,
            part_number=part.part_number,
            name=part.name,
            description=part.description or "",
            created_at=part.created_at,
            updated_at=part.updated_at,
            parent_count=len(parent_parts),
            child_count=len(child_parts),
            parent_parts=parent_parts,
            child_parts=child_parts,
        )

    def get_part_audit_logs(self, part_id: str) -> List[AuditLogEntry]:
        self.require_part(part_id)
        return [
            AuditLogEntry(
                id=log.id,
                part_id=log.part_id,
                action=log.action,
                message=log.message,
                timestamp=log.timestamp,
                metadata=log.meta,
            )
            for log in self.audit.list_for_part(part_id)
        ]
