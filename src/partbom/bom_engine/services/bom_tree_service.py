"""
Bounded BOM tree expansion.

Expansion is capped by depth and by the total number of emitted nodes. Going
over the node cap aborts the whole call; partial trees are never returned.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Set, Union

from sqlalchemy.orm import Session

from partbom.bom_engine.schemas.part_bom import BomTreeNode, BomTreeResponse
from partbom.bom_engine.services.bom_service import BOMService
from partbom.bom_engine.services.part_service import to_part_summary
from partbom.exceptions import LimitExceededError, ValidationError
from partbom.models.part import BOMLink, Part

logger = logging.getLogger(__name__)

MAX_EXPAND_DEPTH = 5
MAX_EXPAND_NODE_LIMIT = 80
DEFAULT_EXPAND_DEPTH = 1

DepthArg = Union[int, str, None]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _parse_int(text: str) -> Optional[int]:
    """Read the leading integer of `text` ("3abc" -> 3); None when there is none."""
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    return int(match.group(1))


def resolve_depth(value: DepthArg) -> int:
    """Translate a caller-supplied depth (int, numeric string or "all")."""
    if value is None or value == "":
        return DEFAULT_EXPAND_DEPTH
    if isinstance(value, str):
        if value.strip().lower() == "all":
            return MAX_EXPAND_DEPTH
        parsed = _parse_int(value)
        if parsed is None:
            raise ValidationError('Depth must be a number or "all".', field="depth")
        return parsed
    return value


def resolve_node_limit(value: Union[int, str, None]) -> int:
    if value is None or value == "":
        return MAX_EXPAND_NODE_LIMIT
    if isinstance(value, str):
        parsed = _parse_int(value)
        if parsed is None:
            raise ValidationError("nodeLimit must be a number.", field="nodeLimit")
        return parsed
    return value


class _TreeBuild:
    """State for one expansion call: limits, running count and per-call caches."""

    def __init__(self, bom: BOMService, depth: int, node_limit: int):
        self.bom = bom
        self.depth = depth
        self.node_limit = node_limit
        self.node_count = 0
        self._parts: Dict[str, Part] = {}
        self._links: Dict[str, List[BOMLink]] = {}

    def part(self, part_id: str) -> Part:
        if part_id not in self._parts:
            self._parts[part_id] = self.bom.parts.require_part(part_id)
        return self._parts[part_id]

    def child_links(self, part_id: str) -> List[BOMLink]:
        if part_id not in self._links:
            self._links[part_id] = self.bom.get_child_links(part_id)
        return self._links[part_id]

    def build(
        self,
        part_id: str,
        current_depth: int,
        quantity_from_parent: Optional[int],
        path: Set[str],
    ) -> BomTreeNode:
        if self.node_count >= self.node_limit:
            raise LimitExceededError(self.node_limit)
        self.node_count += 1

        part = self.part(part_id)
        links = self.child_links(part_id)
        children: List[BomTreeNode] = []

        if current_depth < self.depth:
            for link in links:
                if link.child_id in path:
                    logger.warning(
                        f"Skipping back-edge {part_id} -> {link.child_id} during BOM expansion"
                    )
                    continue
                children.append(
                    self.build(
                        link.child_id,
                        current_depth + 1,
                        link.quantity,
                        path | {link.child_id},
                    )
                )

        return BomTreeNode(
            part=to_part_summary(part),
            quantity_from_parent=quantity_from_parent,
            has_children=len(links) > 0,
            children=children,
        )


class BOMTreeService:
    def __init__(self, session: Session, bom: Optional[BOMService] = None):
        self.session = session
        self.bom = bom or BOMService(session)

    @staticmethod
    def validate_limits(depth: Any, node_limit: Any) -> None:
        if not _is_int(depth) or depth < 0:
            raise ValidationError("Depth must be an integer >= 0.", field="depth")
        if depth > MAX_EXPAND_DEPTH:
            raise ValidationError(
                f"Expand limit exceeded. Maximum supported depth is {MAX_EXPAND_DEPTH}.",
                field="depth",
            )
        if not _is_int(node_limit) or node_limit <= 0:
            raise ValidationError("Node limit must be an integer > 0.", field="nodeLimit")
        if node_limit > MAX_EXPAND_NODE_LIMIT:
            raise ValidationError(
                "Node limit too large. Maximum supported node limit is "
                f"{MAX_EXPAND_NODE_LIMIT}.",
                field="nodeLimit",
            )

    def get_tree(
        self,
        root_id: str,
        depth: DepthArg = DEFAULT_EXPAND_DEPTH,
        node_limit: Union[int, str, None] = MAX_EXPAND_NODE_LIMIT,
    ) -> BomTreeResponse:
        """
        Expand the BOM below `root_id`.

        Args:
            root_id: Root part id
            depth: Levels below the root to expand; "all" means MAX_EXPAND_DEPTH
            node_limit: Maximum number of nodes in the response, root included

        Raises:
            ValidationError: depth/node_limit out of range
            NotFoundError: unknown root part
            LimitExceededError: the expansion needs more than node_limit nodes
        """
        resolved_depth = resolve_depth(depth)
        resolved_limit = resolve_node_limit(node_limit)
        self.validate_limits(resolved_depth, resolved_limit)

        build = _TreeBuild(self.bom, resolved_depth, resolved_limit)
        build.part(root_id)
        tree = build.build(root_id, 0, None, {root_id})

        logger.debug(
            f"Expanded BOM for {root_id}: depth={resolved_depth} "
            f"nodes={build.node_count}/{resolved_limit}"
        )
        return BomTreeResponse(
            root_part_id=root_id,
            requested_depth=resolved_depth,
            node_limit=resolved_limit,
            node_count=build.node_count,
            tree=tree,
        )
