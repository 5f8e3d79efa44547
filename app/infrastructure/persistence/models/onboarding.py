"""OnboardingProgress ORM model."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TimestampedModel
from app.shared.enums import OnboardingStatus

_ACTIVE_CLAUSE = f"status = '{OnboardingStatus.IN_PROGRESS.value}'"


class OnboardingProgress(TimestampedModel, Base):
    """Per-member onboarding record. Table: onboarding_progress. Never deleted."""

    __tablename__ = "onboarding_progress"

    member_id: Mapped[str] = mapped_column(
        String, ForeignKey("member.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    steps: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_onboarding_progress_member_started", "member_id", "started_at"),
        # At most one in-progress record per member.
        Index(
            "uq_onboarding_progress_member_active",
            "member_id",
            unique=True,
            postgresql_where=text(_ACTIVE_CLAUSE),
            sqlite_where=text(_ACTIVE_CLAUSE),
        ),
        CheckConstraint(
            "status IN ({})".format(
                ", ".join(f"'{v}'" for v in OnboardingStatus.values())
            ),
            name="onboarding_progress_status_check",
        ),
    )
