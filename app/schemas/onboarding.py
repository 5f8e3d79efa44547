"""Onboarding API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field


class FollowUpRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    template: str = Field(..., min_length=1, max_length=128)
    offset_minutes: int = Field(..., ge=0)


class OnboardingStartRequest(BaseModel):
    """Optional overrides for the default onboarding sequence."""

    send_welcome_email: bool | None = None
    welcome_template: str | None = Field(default=None, min_length=1, max_length=128)
    create_followup_task: bool | None = None
    followup_task_assignee: str | None = Field(default=None, min_length=1, max_length=255)
    followup_task_due_hours: int | None = Field(default=None, gt=0)
    follow_ups: list[FollowUpRequest] | None = None


class OnboardingStepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    kind: str
    status: str
    offset_minutes: int
    template: str | None
    scheduled_for: datetime | None
    completed_at: datetime | None
    error: str | None


class OnboardingProgressResponse(BaseModel):
    """Onboarding progress for one member."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    member_id: str
    status: str
    started_at: datetime
    completed_at: datetime | None
    steps: list[OnboardingStepResponse]

    @computed_field
    @property
    def progress_percentage(self) -> int:
        if not self.steps:
            return 0
        done = sum(1 for s in self.steps if s.status != "pending")
        return round(done * 100 / len(self.steps))
