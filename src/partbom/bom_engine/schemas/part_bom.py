"""
Read models for parts, BOM usage and tree expansion.

These are built fresh on every read and never persisted. Field names are
snake_case in Python and serialise with camelCase aliases
(`model_dump(by_alias=True)`) for the request layer.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PartSummary(_CamelModel):
    id: str
    part_number: str
    name: str


class ChildPartUsage(PartSummary):
    quantity: int


class PartDetails(_CamelModel):
    id: str
    part_number: str
    name: str
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    parent_count: int = 0
    child_count: int = 0
    parent_parts: List[PartSummary] = Field(default_factory=list)
    child_parts: List[ChildPartUsage] = Field(default_factory=list)


class PartSearchFilters(_CamelModel):
    part_number: Optional[str] = None
    name: Optional[str] = None
    q: Optional[str] = None


class AuditLogEntry(_CamelModel):
    id: str
    part_id: str
    action: str
    message: str
    timestamp: datetime
    metadata: Optional[Dict[str, Any]] = None


class BomTreeNode(_CamelModel):
    part: PartSummary
    quantity_from_parent: Optional[int] = None
    has_children: bool = False
    children: List["BomTreeNode"] = Field(default_factory=list)

    def iter_nodes(self):
        """Depth-first, pre-order walk over this node and its descendants."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()


class BomTreeResponse(_CamelModel):
    root_part_id: str
    requested_depth: int
    node_limit: int
    node_count: int
    tree: BomTreeNode


BomTreeNode.model_rebuild()
