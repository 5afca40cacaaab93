from partbom.bom_engine.schemas.part_bom import (
    AuditLogEntry,
    BomTreeNode,
    BomTreeResponse,
    ChildPartUsage,
    PartDetails,
    PartSearchFilters,
    PartSummary,
)

__all__ = [
    "AuditLogEntry",
    "BomTreeNode",
    "BomTreeResponse",
    "ChildPartUsage",
    "PartDetails",
    "PartSearchFilters",
    "PartSummary",
]
