"""
Audit logging utilities.

Lead edits, commission overrides and user changes are recorded so
admins can review who touched what.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.models.audit import AuditAction, AuditLog


async def log_action(
    db: AsyncSession,
    user_id: str,
    action: AuditAction,
    target_type: Optional[str] = None,
    target_id: Optional[str] = None,
    action_metadata: Optional[dict[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> AuditLog:
    """
    Record an auditable action.

    Args:
        db: Database session
        user_id: ID of the user performing the action
        action: Type of action being performed
        target_type: Type of entity affected ("lead", "user")
        target_id: ID of the affected entity
        action_metadata: Additional context (old/new status, amounts)
        ip_address: Client IP address

    Returns:
        The pending AuditLog row; the caller's session commits it.
    """
    log_entry = AuditLog(
        user_id=user_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        action_metadata=action_metadata,
        ip_address=ip_address,
    )
    db.add(log_entry)
    return log_entry


def get_client_ip(request) -> Optional[str]:
    """Client IP, honouring X-Forwarded-For behind a proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    if getattr(request, "client", None):
        return request.client.host

    return None
