"""Initial database schema

Revision ID: 000_initial_schema
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "000_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LEAD_STATUSES = ("Demo Scheduled", "Warm Lead", "Hot Lead", "Closed", "Lost", "Demo No Show")

AUDIT_ACTIONS = (
    "login",
    "logout",
    "create_lead",
    "update_lead",
    "delete_lead",
    "change_status",
    "add_note",
    "override_commission",
    "complete_kickoff",
    "create_user",
    "update_user",
    "delete_user",
    "update_commission_rules",
)


def upgrade() -> None:
    """Create all initial tables."""

    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("closed_deals", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_commission", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Commission rules table
    op.create_table(
        "commission_rules",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("threshold", sa.Integer(), nullable=False, comment="Number of closes before this rule applies"),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False, comment="Commission per close"),
        sa.UniqueConstraint("user_id", "threshold", name="uq_commission_rules_user_threshold"),
    )
    op.create_index("ix_commission_rules_user_id", "commission_rules", ["user_id"])

    # Leads table
    op.create_table(
        "leads",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("contact_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("business_name", sa.String(255), nullable=True),
        sa.Column("lead_source", sa.String(100), nullable=True),
        sa.Column("crm", sa.String(100), nullable=True),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("vertical", sa.String(100), nullable=True),
        sa.Column("status", sa.Enum(*LEAD_STATUSES, name="leadstatus"), nullable=False),
        sa.Column("setup_fee", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("mrr", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("value", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("commission_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("demo_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("demo_booked_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("signup_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("next_follow_up", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("kickoff_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_leads_email", "leads", ["email"])
    op.create_index("ix_leads_status", "leads", ["status"])
    op.create_index("ix_leads_demo_date", "leads", ["demo_date"])
    op.create_index("ix_leads_signup_date", "leads", ["signup_date"])
    op.create_index("ix_leads_owner_id", "leads", ["owner_id"])

    # Notes table
    op.create_table(
        "notes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "lead_id",
            sa.String(36),
            sa.ForeignKey("leads.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_notes_lead_id", "notes", ["lead_id"])

    # Audit logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("action", sa.Enum(*AUDIT_ACTIONS, name="auditaction"), nullable=False),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("target_id", sa.String(36), nullable=True),
        sa.Column("action_metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("audit_logs")
    op.drop_table("notes")
    op.drop_table("leads")
    op.drop_table("commission_rules")
    op.drop_table("users")

    sa.Enum(name="auditaction").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="leadstatus").drop(op.get_bind(), checkfirst=True)
