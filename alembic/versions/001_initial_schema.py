"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

Creates all initial tables for FestivalHub:
- Users
- Festivals and their organizers
- Performances
- Audit logs
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== USERS ====================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="USER"),
        sa.Column("account_status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("failed_password_attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # ==================== FESTIVALS ====================
    op.create_table(
        "festivals",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("start_date", sa.Date),
        sa.Column("end_date", sa.Date),
        sa.Column("venue", sa.String(255)),
        sa.Column("state", sa.String(30), nullable=False, server_default="CREATED"),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_festivals_name", "festivals", ["name"], unique=True)
    op.create_index("ix_festivals_state", "festivals", ["state"])

    op.create_table(
        "festival_organizers",
        sa.Column(
            "festival_id",
            sa.Uuid,
            sa.ForeignKey("festivals.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "user_id",
            sa.Uuid,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    # ==================== PERFORMANCES ====================
    op.create_table(
        "performances",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column(
            "festival_id",
            sa.Uuid,
            sa.ForeignKey("festivals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("creator_id", sa.Uuid, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("staff_assigned_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("genre", sa.String(100)),
        sa.Column("duration", sa.Integer),
        sa.Column("band_members", sa.JSON, nullable=False),
        sa.Column("state", sa.String(30), nullable=False, server_default="CREATED"),
        sa.Column("approved", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("review_score", sa.Integer),
        sa.Column("review_comments", sa.Text),
        sa.Column("rejection_reason", sa.Text),
        sa.Column("setlist", sa.JSON),
        sa.Column("preferred_rehearsal_slots", sa.JSON),
        sa.Column("preferred_performance_slots", sa.JSON),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("festival_id", "name", name="uq_performances_festival_name"),
    )
    op.create_index("ix_performances_festival_id", "performances", ["festival_id"])
    op.create_index("ix_performances_creator_id", "performances", ["creator_id"])
    op.create_index("ix_performances_genre", "performances", ["genre"])
    op.create_index("ix_performances_state", "performances", ["state"])

    # ==================== AUDIT ====================
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("actor_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("resource_type", sa.String(50), nullable=False),
        sa.Column("resource_id", sa.Uuid),
        sa.Column("old_values", sa.JSON),
        sa.Column("new_values", sa.JSON),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_resource_type", "audit_logs", ["resource_type"])
    op.create_index("ix_audit_logs_resource_id", "audit_logs", ["resource_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("audit_logs")
    op.drop_table("performances")
    op.drop_table("festival_organizers")
    op.drop_table("festivals")
    op.drop_table("users")
