"""Application DTOs: plain dataclasses passed between layers (no ORM types)."""

from app.application.dtos.automation import (
    ActionOutcome,
    ActionResult,
    AutomationCreate,
    AutomationLogCreate,
    AutomationLogResult,
    AutomationRunCounts,
    AutomationStats,
    LogAggregate,
    ProcessDueResult,
    RunContinuation,
    RunOutcome,
)
from app.application.dtos.onboarding import FollowUpConfig, OnboardingConfig
from app.application.dtos.task import TaskResult

__all__ = [
    "ActionOutcome",
    "ActionResult",
    "AutomationCreate",
    "AutomationLogCreate",
    "AutomationLogResult",
    "AutomationRunCounts",
    "AutomationStats",
    "FollowUpConfig",
    "LogAggregate",
    "OnboardingConfig",
    "ProcessDueResult",
    "RunContinuation",
    "RunOutcome",
    "TaskResult",
]
