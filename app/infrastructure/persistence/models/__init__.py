"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.automation import Automation, AutomationLog
from app.infrastructure.persistence.models.member import Member
from app.infrastructure.persistence.models.mixins import (
    AppendOnlyModel,
    CreatedAtMixin,
    CuidMixin,
    TimestampedModel,
    TimestampMixin,
)
from app.infrastructure.persistence.models.onboarding import OnboardingProgress
from app.infrastructure.persistence.models.task import Task

__all__ = [
    "AppendOnlyModel",
    "Automation",
    "AutomationLog",
    "CreatedAtMixin",
    "CuidMixin",
    "Member",
    "OnboardingProgress",
    "Task",
    "TimestampedModel",
    "TimestampMixin",
]
