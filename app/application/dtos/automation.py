"""DTOs for automation definitions, runs and run logs (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AutomationCreate:
    """Validated input for creating an automation definition."""

    name: str
    trigger_type: str
    actions: list[dict[str, Any]]
    description: str | None = None
    trigger_conditions: dict[str, Any] | list[Any] | None = None
    status: str = "active"
    schedule_interval_seconds: int | None = None
    next_run: datetime | None = None
    continue_on_error: bool = False
    created_by: str | None = None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one action. ok=False always carries a human-readable error."""

    ok: bool
    error: str | None = None
    detail: dict[str, Any] | None = None

    @classmethod
    def success(cls, detail: dict[str, Any] | None = None) -> "ActionResult":
        return cls(ok=True, detail=detail)

    @classmethod
    def failure(cls, error: str) -> "ActionResult":
        return cls(ok=False, error=error)


@dataclass(frozen=True)
class ActionOutcome:
    """ActionResult tagged with the action's position and type (stored on the log)."""

    index: int
    type: str
    ok: bool
    error: str | None = None
    detail: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"index": self.index, "type": self.type, "ok": self.ok}
        if self.error is not None:
            data["error"] = self.error
        if self.detail:
            data["detail"] = self.detail
        return data


@dataclass(frozen=True)
class RunContinuation:
    """Where a suspended run picks up again.

    skip_delay is set when the run was suspended on an action's own delay,
    so the resumed run executes that action instead of waiting again.
    """

    automation_id: str
    resume_index: int
    context: dict[str, Any]
    parent_log_id: str | None = None
    skip_delay: bool = False


@dataclass(frozen=True)
class RunOutcome:
    """Result of one Engine invocation (exactly one log entry)."""

    automation_id: str
    status: str
    success: bool
    actions_executed: int
    actions_failed: int
    error: str | None = None
    failed_action_type: str | None = None
    action_results: tuple[ActionOutcome, ...] = ()
    log_id: str | None = None
    resumes_at: datetime | None = None


@dataclass(frozen=True)
class AutomationLogCreate:
    """Log entry to append at the end of a run."""

    automation_id: str | None
    status: str
    success: bool
    actions_executed: int
    actions_failed: int = 0
    error_message: str | None = None
    member_id: str | None = None
    action_results: list[dict[str, Any]] = field(default_factory=list)
    trigger_data: dict[str, Any] = field(default_factory=dict)
    parent_log_id: str | None = None


@dataclass(frozen=True)
class AutomationLogResult:
    """Automation log read model."""

    id: str
    automation_id: str | None
    member_id: str | None
    status: str
    success: bool
    error_message: str | None
    actions_executed: int
    actions_failed: int
    action_results: list[dict[str, Any]]
    trigger_data: dict[str, Any]
    parent_log_id: str | None
    created_at: datetime


@dataclass(frozen=True)
class LogAggregate:
    """Counts over terminal (completed/failed) log entries."""

    total: int
    successful: int
    failed: int
    last_run_at: datetime | None


@dataclass(frozen=True)
class AutomationRunCounts:
    """Per-automation breakdown row for stats."""

    automation_id: str
    automation_name: str
    total: int
    successful: int
    failed: int


@dataclass(frozen=True)
class AutomationStats:
    """Aggregated run statistics over the run log."""

    total_runs: int
    successful_runs: int
    failed_runs: int
    success_rate: float
    last_run_at: datetime | None
    by_automation: list[AutomationRunCounts]
    recent_logs: list[AutomationLogResult]


@dataclass(frozen=True)
class ProcessDueResult:
    """Aggregate result of one scheduler pass."""

    processed: int
    succeeded: int
    failed: int
    skipped: int = 0
    failed_automation_ids: tuple[str, ...] = ()
