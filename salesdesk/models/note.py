"""
Note model: free-text annotations on leads.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salesdesk.models.base import Base, UUIDPrimaryKeyMixin, utcnow

if TYPE_CHECKING:
    from salesdesk.models.lead import Lead
    from salesdesk.models.user import User


class Note(Base, UUIDPrimaryKeyMixin):
    """Immutable note, deleted together with its lead."""

    __tablename__ = "notes"

    lead_id: Mapped[str] = mapped_column(
        ForeignKey("leads.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    lead: Mapped["Lead"] = relationship(
        "Lead",
        back_populates="notes",
    )
    author: Mapped[Optional["User"]] = relationship("User")

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, lead_id={self.lead_id})>"
