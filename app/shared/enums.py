"""Shared enumerations for the Guildhall application.

Cross-cutting enums used by application and infrastructure (e.g. run log
status, onboarding progress, tasks). Definition enums (e.g. TriggerType)
live in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class RunStatus(_ValuesMixin, str, Enum):
    """Outcome status of one automation run (one log entry)."""

    COMPLETED = "completed"
    FAILED = "failed"
    SUSPENDED = "suspended"
    SKIPPED = "skipped"


class OnboardingStatus(_ValuesMixin, str, Enum):
    """Onboarding lifecycle. 'not_started' is the absence of a record."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class OnboardingStepStatus(_ValuesMixin, str, Enum):
    """Status of one onboarding step."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class OnboardingStepKind(_ValuesMixin, str, Enum):
    """What an onboarding step does when it runs."""

    EMAIL = "email"
    TASK_LIST = "task_list"


class TaskStatus(_ValuesMixin, str, Enum):
    """Staff task status."""

    OPEN = "open"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
