from partbom.models.audit import AuditAction, AuditLog
from partbom.models.base import Base
from partbom.models.part import BOMLink, Part
from partbom.models.sequence import IdSequence

__all__ = ["Base", "Part", "BOMLink", "AuditLog", "AuditAction", "IdSequence"]
