"""
User and commission rule models.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salesdesk.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from salesdesk.models.audit import AuditLog
    from salesdesk.models.lead import Lead


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Sales team member or admin.

    - admin: manages users, commission rules and sees every report
    - rep: works their own leads

    closed_deals and total_commission are derived from leads and are
    refreshed by the scheduler; reports always recompute them.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Derived totals
    closed_deals: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
    )
    total_commission: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        server_default="0",
        nullable=False,
    )

    # Relationships
    commission_rules: Mapped[List["CommissionRule"]] = relationship(
        "CommissionRule",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="CommissionRule.threshold",
    )
    leads: Mapped[List["Lead"]] = relationship(
        "Lead",
        back_populates="owner",
        passive_deletes=True,
    )
    audit_logs: Mapped[List["AuditLog"]] = relationship(
        "AuditLog",
        back_populates="user",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', admin={self.is_admin})>"


class CommissionRule(Base, UUIDPrimaryKeyMixin):
    """
    Per-close commission amount once a rep's closed-deal count exceeds
    the threshold. The threshold 0 rule is the base rate.
    """

    __tablename__ = "commission_rules"
    __table_args__ = (
        UniqueConstraint("user_id", "threshold", name="uq_commission_rules_user_threshold"),
    )

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    threshold: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Number of closes before this rule applies",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Commission per close",
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="commission_rules",
    )

    def __repr__(self) -> str:
        return f"<CommissionRule(user_id={self.user_id}, threshold={self.threshold}, amount={self.amount})>"
