from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, String, Text

from partbom.models.base import Base


class AuditAction(str, enum.Enum):
    PART_CREATED = "PART_CREATED"
    PART_UPDATED = "PART_UPDATED"
    BOM_LINK_CREATED = "BOM_LINK_CREATED"
    BOM_LINK_UPDATED = "BOM_LINK_UPDATED"
    BOM_LINK_REMOVED = "BOM_LINK_REMOVED"


class AuditLog(Base):
    """Append-only trail of part and BOM link mutations, keyed per part."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("idx_audit_logs_part_timestamp", "part_id", "timestamp"),
    )

    id = Column(String(36), primary_key=True)
    part_id = Column(
        String(36), ForeignKey("parts.id", ondelete="CASCADE"), nullable=False
    )
    action = Column(String(32), nullable=False)
    message = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    # `metadata` is reserved on declarative classes.
    meta = Column("metadata", JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<AuditLog id={self.id} part_id={self.part_id} action={self.action}>"
