"""Audit trail for privileged appointment changes."""

import logging
from typing import Optional, Dict, Any
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.admin_audit_log import AdminAuditLog
from app.models.user import User

logger = logging.getLogger(__name__)


async def log_admin_action(
    db: AsyncSession,
    actor: User,
    action: str,
    appointment_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None,
    commit: bool = True,
) -> AdminAuditLog:
    """Log a staff/admin action to the audit trail.

    Args:
        db: Database session
        actor: User performing the action
        action: Action type (e.g., "status_override", "payment_update", "appointment_delete")
        appointment_id: Appointment the action touched (if applicable)
        details: Additional JSON details about the action
        commit: False leaves the entry in the caller's transaction so it
            lands together with the change it records

    Returns:
        The created audit log entry
    """
    audit_entry = AdminAuditLog(
        actor_id=actor.id,
        actor_role=actor.role,
        action=action,
        appointment_id=appointment_id,
        details=details or {}
    )

    db.add(audit_entry)
    if commit:
        await db.commit()
        await db.refresh(audit_entry)

    logger.info(
        "Audit log recorded: actor=%s role=%s action=%s appointment=%s",
        actor.id, actor.role, action, appointment_id,
    )

    return audit_entry


async def list_admin_actions(
    db: AsyncSession,
    appointment_id: Optional[int] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[AdminAuditLog]:
    """Newest audit entries first, optionally for one appointment."""
    query = select(AdminAuditLog)
    if appointment_id is not None:
        query = query.where(AdminAuditLog.appointment_id == appointment_id)
    query = query.order_by(desc(AdminAuditLog.created_at), desc(AdminAuditLog.id)).limit(limit).offset(offset)
    result = await db.execute(query)
    return list(result.scalars().all())
