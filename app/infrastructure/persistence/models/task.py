"""Task ORM model. Staff task created by automations and onboarding."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TimestampedModel
from app.shared.enums import TaskStatus


class Task(TimestampedModel, Base):
    """Task created by a create_task action or onboarding. Table: task."""

    __tablename__ = "task"

    member_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("member.id", ondelete="CASCADE"), nullable=True, index=True
    )
    source_automation_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("automation.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    assignee: Mapped[str | None] = mapped_column(String(255), nullable=True)
    due_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=TaskStatus.OPEN.value,
        server_default=TaskStatus.OPEN.value,
    )

    __table_args__ = (Index("ix_task_assignee_status", "assignee", "status"),)
