"""Automation and AutomationLog ORM models."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import AutomationStatus, TriggerType
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AppendOnlyModel, TimestampedModel
from app.shared.enums import RunStatus


def _in_check(column: str, values: list[str]) -> str:
    return "{} IN ({})".format(
        column, ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    )


class Automation(TimestampedModel, Base):
    """Automation definition. Table: automation. Trigger + ordered actions JSON."""

    __tablename__ = "automation"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    trigger_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    trigger_conditions: Mapped[dict[str, Any] | list[Any] | None] = mapped_column(
        JSON, nullable=True
    )
    actions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=AutomationStatus.ACTIVE.value,
        server_default=AutomationStatus.ACTIVE.value,
    )
    schedule_interval_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    next_run: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_run_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    run_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    continue_on_error: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.false()
    )
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("ix_automation_due", "status", "trigger_type", "next_run"),
        CheckConstraint(
            _in_check("status", AutomationStatus.values()), name="automation_status_check"
        ),
        CheckConstraint(
            _in_check("trigger_type", TriggerType.values()),
            name="automation_trigger_type_check",
        ),
        CheckConstraint("run_count >= 0", name="automation_run_count_check"),
    )


class AutomationLog(AppendOnlyModel, Base):
    """Automation run log. Table: automation_log. Append-only."""

    __tablename__ = "automation_log"

    automation_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("automation.id", ondelete="SET NULL"), nullable=True, index=True
    )
    member_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    actions_executed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    actions_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    action_results: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    trigger_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    parent_log_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("automation_log.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        Index("ix_automation_log_automation_created", "automation_id", "created_at"),
        CheckConstraint(
            _in_check("status", RunStatus.values()), name="automation_log_status_check"
        ),
    )
