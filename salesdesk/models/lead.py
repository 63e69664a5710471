"""
Lead model for prospects and closed deals.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salesdesk.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from salesdesk.models.note import Note
    from salesdesk.models.user import User


class LeadStatus(str, Enum):
    """Stage of the lead in the sales pipeline."""
    DEMO_SCHEDULED = "Demo Scheduled"
    WARM_LEAD = "Warm Lead"
    HOT_LEAD = "Hot Lead"
    CLOSED = "Closed"
    LOST = "Lost"
    DEMO_NO_SHOW = "Demo No Show"  # outside the advance cycle


class Lead(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    A prospect or a closed sale.

    Leads booked through the scheduling provider arrive with status
    DEMO_SCHEDULED. While the status is CLOSED, signup_date and
    closed_at are kept equal by the lifecycle service.
    """

    __tablename__ = "leads"

    # Contact
    contact_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    business_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    lead_source: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    crm: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="CRM system the prospect currently uses",
    )
    location: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="US state or Canadian city",
    )
    vertical: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    status: Mapped[LeadStatus] = mapped_column(
        SQLAlchemyEnum(
            LeadStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=LeadStatus.DEMO_SCHEDULED,
        nullable=False,
        index=True,
    )

    # Money
    setup_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    mrr: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
        comment="mrr + setup_fee",
    )
    commission_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
        comment="Manual override; bypasses commission rules",
    )

    # Dates
    demo_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )
    demo_booked_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the demo was booked, not when it happens",
    )
    signup_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )
    next_follow_up: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    closed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    kickoff_completed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default="false",
        nullable=False,
    )

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # Relationships
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="leads",
    )
    notes: Mapped[List["Note"]] = relationship(
        "Note",
        back_populates="lead",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Note.created_at",
    )

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, contact='{self.contact_name}', status={self.status})>"
