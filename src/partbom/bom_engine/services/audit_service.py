"""
Audit Service
Append-only trail of part and BOM link mutations.

Entries are added to the caller's session, so they commit or roll back
together with the mutation that produced them.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from partbom.bom_engine.services.sequence_service import AUDIT_ID, SequenceService
from partbom.models.audit import AuditAction, AuditLog

logger = logging.getLogger(__name__)


class AuditService:
    def __init__(self, session: Session, sequences: Optional[SequenceService] = None):
        self.session = session
        self.sequences = sequences or SequenceService(session)

    def record(
        self,
        part_id: str,
        action: Union[str, AuditAction],
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        action_value = AuditAction(action).value
        log = AuditLog(
            id=self.sequences.allocate(
                AUDIT_ID, exists=lambda cid: self.session.get(AuditLog, cid) is not None
            ),
            part_id=part_id,
            action=action_value,
            message=message,
            timestamp=datetime.utcnow(),
            meta=dict(metadata) if metadata else None,
        )
        self.session.add(log)
        self.session.flush()
        logger.debug(f"[AUDIT] {log.id} {action_value} part={part_id}: {message}")
        return log

    def list_for_part(self, part_id: str) -> List[AuditLog]:
        """Entries for one part, newest first."""
        return (
            self.session.query(AuditLog)
            .filter(AuditLog.part_id == part_id)
            .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .all()
        )
