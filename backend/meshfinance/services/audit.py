import logging

from sqlalchemy import select
from sqlalchemy.orm import Session
from meshfinance.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def log_event(
    s: Session,
    user_id: int,
    action: str,
    entity_type: str,
    entity_id: int | None = None,
    details: dict | None = None,
) -> AuditLog:
    """Record a mutation made by ``user_id``; commits on its own."""
    row = AuditLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
    )
    s.add(row)
    s.commit()
    logger.debug("audit user_id=%s %s %s:%s", user_id, action, entity_type, entity_id)
    return row


def events_for_user(
    s: Session,
    user_id: int,
    entity_type: str | None = None,
    action: str | None = None,
    limit: int = 200,
) -> list[AuditLog]:
    # newest first; a user only ever sees their own trail
    q = select(AuditLog).where(AuditLog.user_id == user_id)
    if entity_type:
        q = q.where(AuditLog.entity_type == entity_type)
    if action:
        q = q.where(AuditLog.action == action)
    q = q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    return s.execute(q).scalars().all()
