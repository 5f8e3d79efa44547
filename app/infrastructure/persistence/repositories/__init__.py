"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.automation_log_repo import (
    AutomationLogRepository,
)
from app.infrastructure.persistence.repositories.automation_repo import AutomationRepository
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.member_repo import MemberRepository
from app.infrastructure.persistence.repositories.onboarding_repo import (
    OnboardingProgressRepository,
)
from app.infrastructure.persistence.repositories.task_repo import TaskRepository

__all__ = [
    "AutomationLogRepository",
    "AutomationRepository",
    "BaseRepository",
    "MemberRepository",
    "OnboardingProgressRepository",
    "TaskRepository",
]
