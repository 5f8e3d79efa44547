"""Automation API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AutomationAction(BaseModel):
    """Single action descriptor; requires type, optional config and delay."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1, max_length=128, description="Action type")
    config: dict[str, Any] | None = None
    delay: int | float | str | None = Field(
        default=None, description='Seconds or a duration string such as "3 days"'
    )


class AutomationCreateRequest(BaseModel):
    """Request body for creating an automation."""

    name: str = Field(..., min_length=1, max_length=255)
    trigger_type: str = Field(..., min_length=1, max_length=64)
    actions: list[AutomationAction] = Field(..., min_length=1)
    description: str | None = None
    trigger_conditions: dict[str, Any] | list[Any] | None = None
    status: str = "active"
    schedule_interval_seconds: int | None = Field(default=None, gt=0)
    next_run: datetime | None = None
    continue_on_error: bool = False
    created_by: str | None = Field(default=None, max_length=255)


class AutomationUpdate(BaseModel):
    """Request body for updating an automation (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    trigger_type: str | None = Field(default=None, min_length=1, max_length=64)
    trigger_conditions: dict[str, Any] | list[Any] | None = None
    actions: list[AutomationAction] | None = Field(default=None, min_length=1)
    status: str | None = None
    schedule_interval_seconds: int | None = Field(default=None, gt=0)
    next_run: datetime | None = None
    continue_on_error: bool | None = None


class AutomationResponse(BaseModel):
    """Automation response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None
    trigger_type: str
    trigger_conditions: dict[str, Any] | list[Any] | None
    actions: list[dict[str, Any]]
    status: str
    schedule_interval_seconds: int | None
    next_run: datetime | None
    last_run_at: datetime | None
    run_count: int
    continue_on_error: bool
    created_by: str | None
    created_at: datetime | None
    updated_at: datetime | None


class RunAutomationRequest(BaseModel):
    """Request body for a manual run: the trigger context."""

    context: dict[str, Any] = Field(default_factory=dict)


class ActionOutcomeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    index: int
    type: str
    ok: bool
    error: str | None = None
    detail: dict[str, Any] | None = None


class RunOutcomeResponse(BaseModel):
    """Result of one run (manual or resumed)."""

    model_config = ConfigDict(from_attributes=True)

    automation_id: str
    status: str
    success: bool
    actions_executed: int
    actions_failed: int
    error: str | None
    failed_action_type: str | None
    action_results: list[ActionOutcomeResponse]
    log_id: str | None
    resumes_at: datetime | None


class AutomationLogResponse(BaseModel):
    """Automation run log entry."""

    model_config = ConfigDict(from_attributes=True)

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


class AutomationRunCountsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    automation_id: str
    automation_name: str
    total: int
    successful: int
    failed: int


class AutomationStatsResponse(BaseModel):
    """Aggregated run statistics."""

    model_config = ConfigDict(from_attributes=True)

    total_runs: int
    successful_runs: int
    failed_runs: int
    success_rate: float = Field(..., description="Percentage, two decimals")
    last_run_at: datetime | None
    by_automation: list[AutomationRunCountsResponse]
    recent_logs: list[AutomationLogResponse]


class ProcessDueResponse(BaseModel):
    """Counts from one scheduler pass."""

    model_config = ConfigDict(from_attributes=True)

    processed: int
    succeeded: int
    failed: int
    skipped: int
    failed_automation_ids: list[str] = Field(default_factory=list)


class AutomationEventRequest(BaseModel):
    """A domain event from another part of the system (donation, event check-in, ...)."""

    trigger_type: str = Field(..., min_length=1, max_length=64)
    context: dict[str, Any] = Field(default_factory=dict)


class AutomationEventResponse(BaseModel):
    """Runs started by one event; automations whose conditions did not match are absent."""

    trigger_type: str
    runs: list[RunOutcomeResponse]


class WorkflowStatusResponse(BaseModel):
    """External workflow status lookup."""

    status_token: str
    status: str
