"""initial automation schema

Revision ID: a1c4e7f0b2d5
Revises:
Create Date: 2026-10-19

Members, automation definitions, the append-only automation run log,
staff tasks and member onboarding progress.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "a1c4e7f0b2d5"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TRIGGER_TYPES = (
    "member_created",
    "member_updated",
    "tier_upgrade",
    "donation_received",
    "event_registration",
    "event_check_in",
    "event_reminder",
    "post_event_survey",
    "scheduled",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _in(column: str, values: tuple[str, ...]) -> str:
    return "{} IN ({})".format(column, ", ".join(f"'{v}'" for v in values))


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "member",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("first_name", sa.String(length=255), nullable=False),
        sa.Column("last_name", sa.String(length=255), nullable=False),
        sa.Column("tier", sa.String(length=32), nullable=False, server_default="bronze"),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_member_email", "member", ["email"])

    op.create_table(
        "automation",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("trigger_type", sa.String(length=64), nullable=False),
        sa.Column("trigger_conditions", sa.JSON(), nullable=True),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("schedule_interval_seconds", sa.Integer(), nullable=True),
        sa.Column("next_run", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_run_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("run_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "continue_on_error", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("created_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            _in("status", ("active", "paused", "disabled")), name="automation_status_check"
        ),
        sa.CheckConstraint(
            _in("trigger_type", _TRIGGER_TYPES), name="automation_trigger_type_check"
        ),
        sa.CheckConstraint("run_count >= 0", name="automation_run_count_check"),
    )
    op.create_index("ix_automation_trigger_type", "automation", ["trigger_type"])
    op.create_index("ix_automation_due", "automation", ["status", "trigger_type", "next_run"])

    op.create_table(
        "automation_log",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("automation_id", sa.String(), nullable=True),
        sa.Column("member_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("actions_executed", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("actions_failed", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("action_results", sa.JSON(), nullable=False),
        sa.Column("trigger_data", sa.JSON(), nullable=False),
        sa.Column("parent_log_id", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["automation_id"], ["automation.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["parent_log_id"], ["automation_log.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            _in("status", ("completed", "failed", "suspended", "skipped")),
            name="automation_log_status_check",
        ),
    )
    op.create_index("ix_automation_log_automation_id", "automation_log", ["automation_id"])
    op.create_index("ix_automation_log_member_id", "automation_log", ["member_id"])
    op.create_index("ix_automation_log_status", "automation_log", ["status"])
    op.create_index("ix_automation_log_created_at", "automation_log", ["created_at"])
    op.create_index(
        "ix_automation_log_automation_created",
        "automation_log",
        ["automation_id", "created_at"],
    )

    op.create_table(
        "task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("member_id", sa.String(), nullable=True),
        sa.Column("source_automation_id", sa.String(), nullable=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("assignee", sa.String(length=255), nullable=True),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="open"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["member_id"], ["member.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["source_automation_id"], ["automation.id"], ondelete="SET NULL"
        ),
    )
    op.create_index("ix_task_member_id", "task", ["member_id"])
    op.create_index("ix_task_assignee_status", "task", ["assignee", "status"])

    op.create_table(
        "onboarding_progress",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("member_id", sa.String(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("steps", sa.JSON(), nullable=False),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["member_id"], ["member.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            _in("status", ("in_progress", "completed", "failed")),
            name="onboarding_progress_status_check",
        ),
    )
    op.create_index("ix_onboarding_progress_member_id", "onboarding_progress", ["member_id"])
    op.create_index(
        "ix_onboarding_progress_member_started",
        "onboarding_progress",
        ["member_id", "started_at"],
    )
    op.create_index(
        "uq_onboarding_progress_member_active",
        "onboarding_progress",
        ["member_id"],
        unique=True,
        postgresql_where=sa.text("status = 'in_progress'"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("onboarding_progress")
    op.drop_table("task")
    op.drop_table("automation_log")
    op.drop_table("automation")
    op.drop_table("member")
