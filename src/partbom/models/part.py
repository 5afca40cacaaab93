"""
Part and BOM link models.

A BOM link is a directed parent -> child edge identified by the ordered
pair (parent_id, child_id). Deleting either part cascades to its links.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from partbom.models.base import Base


class Part(Base):
    __tablename__ = "parts"

    id = Column(String(36), primary_key=True)
    part_number = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    child_links = relationship(
        "BOMLink",
        foreign_keys="BOMLink.parent_id",
        back_populates="parent",
        cascade="all, delete",
        passive_deletes=True,
    )
    parent_links = relationship(
        "BOMLink",
        foreign_keys="BOMLink.child_id",
        back_populates="child",
        cascade="all, delete",
        passive_deletes=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "partNumber": self.part_number,
            "name": self.name,
            "description": self.description,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Part id={self.id} part_number={self.part_number}>"


class BOMLink(Base):
    __tablename__ = "bom_links"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="bom_links_quantity_check"),
        CheckConstraint("parent_id <> child_id", name="bom_links_no_self_link"),
        Index("idx_bom_links_parent", "parent_id"),
        Index("idx_bom_links_child", "child_id"),
    )

    parent_id = Column(
        String(36), ForeignKey("parts.id", ondelete="CASCADE"), primary_key=True
    )
    child_id = Column(
        String(36), ForeignKey("parts.id", ondelete="CASCADE"), primary_key=True
    )
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    parent = relationship("Part", foreign_keys=[parent_id], back_populates="child_links")
    child = relationship("Part", foreign_keys=[child_id], back_populates="parent_links")

    def to_dict(self) -> dict:
        return {
            "parentId": self.parent_id,
            "childId": self.child_id,
            "quantity": self.quantity,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<BOMLink {self.parent_id} -> {self.child_id} x{self.quantity}>"
