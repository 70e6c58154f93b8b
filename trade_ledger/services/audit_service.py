"""
Audit service, the ledger's event sink.

Every cancellation, reversal, payment and transfer leaves an
AuditLog row behind. Recording an event must never break the
operation that produced it: emit_event logs sink failures and
carries on.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from trade_ledger.models.audit_log import AuditLog
from trade_ledger.models.enums import AuditAction

logger = logging.getLogger(__name__)


class AuditService:

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        entity_table: str,
        entity_id,
        action: AuditAction,
        message: str,
    ) -> AuditLog:
        """Append an audit row. Raises if the row cannot be written."""
        entry = AuditLog(
            entity_table=entity_table,
            entity_id=str(entity_id),
            action=action,
            message=message,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_entries(self, entity_table: str, entity_id) -> list[AuditLog]:
        """Audit history of one entity, oldest first."""
        entries = self.db.execute(
            select(AuditLog)
            .where(
                AuditLog.entity_table == entity_table,
                AuditLog.entity_id == str(entity_id),
            )
            .order_by(AuditLog.created_at, AuditLog.id)
        ).scalars().all()
        return list(entries)


def emit_event(
    db: Session,
    entity_table: str,
    entity_id,
    action: AuditAction,
    message: str,
) -> AuditLog | None:
    """
    Fire-and-forget audit recording.

    The row is written inside a savepoint on the caller's session, so
    a failed write rolls back only the audit row and the caller's
    transaction stays usable. Returns the new row, or None if the sink
    failed. A failure is logged and never reaches the caller.
    """
    # Pending business changes must fail loudly, not as a sink failure
    db.flush()
    try:
        with db.begin_nested():
            return AuditService(db).record(entity_table, entity_id, action, message)
    except SQLAlchemyError:
        logger.exception(
            "Failed to record audit event for %s %s: %s",
            entity_table,
            entity_id,
            message,
        )
        return None
