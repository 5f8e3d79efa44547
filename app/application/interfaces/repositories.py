"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.automation import (
        AutomationCreate,
        AutomationLogCreate,
        AutomationLogResult,
        AutomationRunCounts,
        LogAggregate,
    )
    from app.application.dtos.task import TaskResult
    from app.domain.entities.automation import AutomationEntity
    from app.domain.entities.member import MemberEntity
    from app.domain.entities.onboarding import OnboardingProgressEntity


# Automation store interface
class IAutomationRepository(Protocol):
    """Protocol for automation definitions and run statistics."""

    async def get_by_id(self, automation_id: str) -> AutomationEntity | None:
        """Return automation by id or None."""

    async def list_automations(
        self,
        *,
        trigger_type: str | None = None,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AutomationEntity]:
        """List automations, newest first, optionally filtered by trigger type and status."""

    async def list_for_trigger(self, trigger_type: str) -> list[AutomationEntity]:
        """Return active automations for trigger_type, oldest first (dispatch order)."""

    async def list_due(self, now: datetime) -> list[AutomationEntity]:
        """Return active scheduled automations with next_run <= now, earliest first."""

    async def create(self, data: AutomationCreate) -> AutomationEntity:
        """Create an automation definition."""

    async def update(self, automation_id: str, patch: dict[str, Any]) -> AutomationEntity | None:
        """Apply patch; return updated automation or None if not found."""

    async def delete(self, automation_id: str) -> bool:
        """Delete automation; return False if not found. Its logs are kept."""

    async def claim_next_run(
        self, automation_id: str, expected_next_run: datetime | None, new_next_run: datetime
    ) -> bool:
        """Advance next_run only if it still equals expected_next_run; True if claimed."""

    async def record_run(self, automation_id: str, ran_at: datetime) -> None:
        """Atomically increment run_count and set last_run_at."""


# Automation run log interface
class IAutomationLogRepository(Protocol):
    """Protocol for the append-only automation run log."""

    async def append(self, entry: AutomationLogCreate) -> str:
        """Append a log entry; return its id."""

    async def get_by_id(self, log_id: str) -> AutomationLogResult | None:
        """Return log entry by id or None."""

    async def list_logs(
        self,
        *,
        automation_id: str | None = None,
        success: bool | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[AutomationLogResult]:
        """List log entries newest first."""

    async def aggregate(self, automation_id: str | None = None) -> LogAggregate:
        """Return counts over completed/failed entries (suspended and skipped excluded)."""

    async def counts_by_automation(self) -> list[AutomationRunCounts]:
        """Return per-automation completed/failed counts for automations that still exist."""


# Onboarding progress repository interface
class IOnboardingProgressRepository(Protocol):
    """Protocol for per-member onboarding progress records."""

    async def get_by_id(
        self, progress_id: str, *, for_update: bool = False
    ) -> OnboardingProgressEntity | None:
        """Return progress record by id or None; for_update locks the row."""

    async def get_active_for_member(self, member_id: str) -> OnboardingProgressEntity | None:
        """Return the member's in_progress record, if any."""

    async def get_latest_for_member(self, member_id: str) -> OnboardingProgressEntity | None:
        """Return the member's most recently started record, if any."""

    async def create(self, progress: OnboardingProgressEntity) -> OnboardingProgressEntity:
        """Persist a new progress record."""

    async def save(self, progress: OnboardingProgressEntity) -> OnboardingProgressEntity:
        """Persist status, steps and completed_at of an existing record."""


# Member repository interface
class IMemberRepository(Protocol):
    """Protocol for the member records automations read and patch."""

    async def get_by_id(self, member_id: str) -> MemberEntity | None:
        """Return member by id or None."""


# Task repository interface (create_task action, onboarding task list)
class ITaskRepository(Protocol):
    """Protocol for staff task records."""

    async def create(
        self,
        title: str,
        *,
        member_id: str | None = None,
        description: str | None = None,
        assignee: str | None = None,
        due_at: datetime | None = None,
        source_automation_id: str | None = None,
    ) -> TaskResult:
        """Create an open task; return created result."""
