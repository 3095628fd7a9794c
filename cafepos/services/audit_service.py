"""
Audit logging service for tracking every mutating action.
"""
import logging
from datetime import datetime
from typing import Optional, Mapping, Any

from cafepos.models.audit_log import AuditLog, AuditAction, SYSTEM_ACTOR_NAME

logger = logging.getLogger(__name__)


def _actor_fields(actor: Optional[Mapping[str, Any]]):
    if not actor:
        return None, SYSTEM_ACTOR_NAME
    return actor.get('id'), actor.get('name') or actor.get('username') or SYSTEM_ACTOR_NAME


def log_action(session, actor: Optional[Mapping[str, Any]], action: str, details: str = '') -> Optional[AuditLog]:
    """
    Append an entry to the audit log.

    The entry is committed on its own, after the business change it
    describes. Failures are logged and swallowed: the triggering request
    must never fail because of the audit trail.

    Args:
        session: Database session
        actor: Token claims of the acting user (``id``, ``name``) or None
        action: AuditAction label
        details: Free-text description

    Returns:
        The AuditLog row, or None if it could not be written
    """
    try:
        user_id, user_name = _actor_fields(actor)
        entry = AuditLog(
            user_id=user_id,
            user_name=user_name,
            action=action,
            details=details or '',
            timestamp=datetime.now()
        )
        session.add(entry)
        session.commit()

        logger.info(f"Audit log created: {action} by {user_name} ({details})")
        return entry

    except Exception as e:
        logger.error(f"Failed to create audit log for {action!r}: {e}")
        try:
            session.rollback()
        except Exception as rollback_error:
            logger.error(f"Rollback after audit failure also failed: {rollback_error}")
        return None


def list_logs(session):
    """All audit entries, newest first."""
    return session.query(AuditLog).order_by(
        AuditLog.timestamp.desc(),
        AuditLog.id.desc()
    ).all()


def clear_logs(session, actor: Optional[Mapping[str, Any]]) -> int:
    """
    Delete every audit entry, then record the clearing itself.

    Returns:
        Number of entries removed
    """
    try:
        removed = session.query(AuditLog).delete(synchronize_session=False)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.warning(f"Audit log cleared ({removed} entries)")
    log_action(session, actor, AuditAction.LOGS_CLEARED, 'Permanently cleared action history')
    return removed
