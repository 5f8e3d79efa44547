"""Onboarding progress domain entity.

One record per onboarding attempt for a member. The record is the state
machine: in_progress until every step is terminal, then completed; failed
only on an unrecoverable problem (e.g. no address to write to).
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from app.shared.enums import OnboardingStatus, OnboardingStepStatus
from app.shared.utils.datetime import ensure_utc, isoformat_utc


def _parse_dt(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(str(value)))


@dataclass
class OnboardingStep:
    """One named onboarding step and its outcome."""

    name: str
    kind: str
    status: str = OnboardingStepStatus.PENDING.value
    offset_minutes: int = 0
    template: str | None = None
    scheduled_for: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None

    def is_terminal(self) -> bool:
        return self.status != OnboardingStepStatus.PENDING.value

    def mark_completed(self, when: datetime) -> None:
        self.status = OnboardingStepStatus.COMPLETED.value
        self.completed_at = when
        self.error = None

    def mark_failed(self, when: datetime, error: str) -> None:
        self.status = OnboardingStepStatus.FAILED.value
        self.completed_at = when
        self.error = error

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["scheduled_for"] = isoformat_utc(self.scheduled_for)
        data["completed_at"] = isoformat_utc(self.completed_at)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OnboardingStep":
        return cls(
            name=data["name"],
            kind=data["kind"],
            status=data.get("status", OnboardingStepStatus.PENDING.value),
            offset_minutes=int(data.get("offset_minutes", 0)),
            template=data.get("template"),
            scheduled_for=_parse_dt(data.get("scheduled_for")),
            completed_at=_parse_dt(data.get("completed_at")),
            error=data.get("error"),
        )


@dataclass
class OnboardingProgressEntity:
    """Domain entity for a member's onboarding progress."""

    id: str
    member_id: str
    status: str
    started_at: datetime
    steps: list[OnboardingStep] = field(default_factory=list)
    config: dict[str, Any] = field(default_factory=dict)
    completed_at: datetime | None = None

    def is_in_progress(self) -> bool:
        return self.status == OnboardingStatus.IN_PROGRESS.value

    def step(self, name: str) -> OnboardingStep | None:
        return next((s for s in self.steps if s.name == name), None)

    def all_steps_terminal(self) -> bool:
        return all(s.is_terminal() for s in self.steps)

    def progress_percentage(self) -> int:
        if not self.steps:
            return 0
        done = sum(1 for s in self.steps if s.is_terminal())
        return round(done * 100 / len(self.steps))

    def complete_if_finished(self, when: datetime) -> bool:
        """Move an in-progress record to completed once every step is terminal."""
        if self.is_in_progress() and self.all_steps_terminal():
            self.status = OnboardingStatus.COMPLETED.value
            self.completed_at = when
            return True
        return False

    def fail(self, when: datetime) -> None:
        self.status = OnboardingStatus.FAILED.value
        self.completed_at = when
