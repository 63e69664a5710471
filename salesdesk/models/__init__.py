"""
Database models for SalesDesk.

All models are exported here for convenient imports:
    from salesdesk.models import Lead, User, Note, etc.
"""

from salesdesk.models.audit import AuditAction, AuditLog
from salesdesk.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from salesdesk.models.lead import Lead, LeadStatus
from salesdesk.models.note import Note
from salesdesk.models.user import CommissionRule, User

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # User
    "User",
    "CommissionRule",
    # Lead
    "Lead",
    "LeadStatus",
    "Note",
    # Audit
    "AuditLog",
    "AuditAction",
]
