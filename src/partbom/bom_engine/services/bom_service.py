from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional, Set

from sqlalchemy.orm import Session

from partbom.bom_engine.services.audit_service import AuditService
from partbom.bom_engine.services.part_service import PartService
from partbom.exceptions import ConflictError, CycleError, NotFoundError, ValidationError
from partbom.models.audit import AuditAction
from partbom.models.part import BOMLink, Part

logger = logging.getLogger(__name__)


def is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class BOMService:
    """
    Manages the parent -> child BOM graph.
    Handles link CRUD, neighbour queries and circularity checks.

    The graph is kept acyclic by checking reachability before every new link;
    quantity updates and removals cannot introduce a cycle.
    """

    def __init__(self, session: Session, parts: Optional[PartService] = None):
        self.session = session
        self.parts = parts or PartService(session)
        self.audit: AuditService = self.parts.audit

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_link(self, parent_id: str, child_id: str) -> Optional[BOMLink]:
        return self.session.get(BOMLink, (parent_id, child_id))

    def get_child_links(self, parent_id: str) -> List[BOMLink]:
        """Outgoing links of `parent_id`, ordered by the child's part number."""
        return (
            self.session.query(BOMLink)
            .join(Part, Part.id == BOMLink.child_id)
            .filter(BOMLink.parent_id == parent_id)
            .order_by(Part.part_number.asc())
            .all()
        )

    def get_parent_ids(self, child_id: str) -> Set[str]:
        rows = (
            self.session.query(BOMLink.parent_id)
            .filter(BOMLink.child_id == child_id)
            .all()
        )
        return {row[0] for row in rows}

    def _child_ids(self, parent_id: str) -> List[str]:
        rows = (
            self.session.query(BOMLink.child_id)
            .filter(BOMLink.parent_id == parent_id)
            .all()
        )
        return [row[0] for row in rows]

    def is_reachable(self, start_id: str, target_id: str) -> bool:
        """
        Check whether a directed path start -> ... -> target exists.

        Iterative DFS with a visited set, so it terminates even if the stored
        graph already contains a cycle.
        """
        stack: List[str] = [start_id]
        visited: Set[str] = set()

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            if current == target_id:
                return True
            visited.add(current)

            for child_id in self._child_ids(current):
                if child_id not in visited:
                    stack.append(child_id)

        return False

    def would_create_cycle(self, parent_id: str, child_id: str) -> bool:
        """Adding parent -> child closes a cycle iff child already reaches parent."""
        return self.is_reachable(child_id, parent_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @staticmethod
    def _require_ids(parent_id: Optional[str], child_id: Optional[str]) -> None:
        if not parent_id or not child_id:
            raise ValidationError("Both parentId and childId are required.")

    @staticmethod
    def _validate_quantity(quantity: Any) -> int:
        if not is_positive_int(quantity):
            raise ValidationError(
                "BOM quantity must be a positive integer.", field="quantity"
            )
        return quantity

    def _missing_link(self, parent: Part, child: Part) -> NotFoundError:
        return NotFoundError(
            f"No BOM link exists between {parent.part_number} and {child.part_number}.",
            resource="bom_link",
            parent_id=parent.id,
            child_id=child.id,
        )

    def create_link(self, parent_id: str, child_id: str, quantity: Any = 1) -> BOMLink:
        self._require_ids(parent_id, child_id)
        parent = self.parts.require_part(parent_id)
        child = self.parts.require_part(child_id)

        if parent.id == child.id:
            raise ValidationError("A part cannot be linked to itself in BOM.")

        quantity = self._validate_quantity(1 if quantity is None else quantity)

        if self.get_link(parent.id, child.id) is not None:
            raise ConflictError(
                f"BOM link already exists between {parent.part_number} and {child.part_number}.",
                parent_id=parent.id,
                child_id=child.id,
            )

        if self.would_create_cycle(parent.id, child.id):
            raise CycleError(parent_id=parent.id, child_id=child.id)

        link = BOMLink(
            parent_id=parent.id,
            child_id=child.id,
            quantity=quantity,
            created_at=datetime.utcnow(),
        )
        self.session.add(link)
        self.session.flush()

        self.audit.record(
            parent.id,
            AuditAction.BOM_LINK_CREATED,
            f"Linked child {child.part_number} to {parent.part_number}.",
            {"childId": child.id, "quantity": quantity},
        )
        self.audit.record(
            child.id,
            AuditAction.BOM_LINK_CREATED,
            f"Linked as child of {parent.part_number}.",
            {"parentId": parent.id, "quantity": quantity},
        )
        logger.info(f"Linked {parent.part_number} -> {child.part_number} x{quantity}")
        return link

    def update_link(self, parent_id: str, child_id: str, quantity: Any) -> BOMLink:
        self._require_ids(parent_id, child_id)
        if quantity is None:
            raise ValidationError("Quantity is required.", field="quantity")

        parent = self.parts.require_part(parent_id)
        child = self.parts.require_part(child_id)
        quantity = self._validate_quantity(quantity)

        link = self.get_link(parent.id, child.id)
        if link is None:
            raise self._missing_link(parent, child)

        link.quantity = quantity
        self.session.flush()

        self.audit.record(
            parent.id,
            AuditAction.BOM_LINK_UPDATED,
            f"Updated quantity for child {child.part_number} in {parent.part_number}.",
            {"childId": child.id, "quantity": quantity},
        )
        self.audit.record(
            child.id,
            AuditAction.BOM_LINK_UPDATED,
            f"Updated quantity in parent {parent.part_number}.",
            {"parentId": parent.id, "quantity": quantity},
        )
        logger.info(f"Updated {parent.part_number} -> {child.part_number} to x{quantity}")
        return link

    def remove_link(self, parent_id: str, child_id: str) -> None:
        self._require_ids(parent_id, child_id)
        parent = self.parts.require_part(parent_id)
        child = self.parts.require_part(child_id)

        link = self.get_link(parent.id, child.id)
        if link is None:
            raise self._missing_link(parent, child)

        self.session.delete(link)
        self.session.flush()

        self.audit.record(
            parent.id,
            AuditAction.BOM_LINK_REMOVED,
            f"Removed child {child.part_number} from {parent.part_number}.",
            {"childId": child.id},
        )
        self.audit.record(
            child.id,
            AuditAction.BOM_LINK_REMOVED,
            f"Removed parent {parent.part_number}.",
            {"parentId": parent.id},
        )
        logger.info(f"Removed link {parent.part_number} -> {child.part_number}")
