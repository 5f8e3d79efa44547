"""DTOs for the member onboarding workflow."""

from dataclasses import asdict, dataclass, field
from typing import Any

from app.domain.exceptions import ValidationException

WELCOME_STEP = "welcome_email"
TASK_LIST_STEP = "task_list"
RESERVED_STEP_NAMES = frozenset({WELCOME_STEP, TASK_LIST_STEP})


@dataclass(frozen=True)
class FollowUpConfig:
    """A follow-up communication sent at an offset from onboarding start."""

    name: str
    template: str
    offset_minutes: int


DEFAULT_FOLLOW_UPS: tuple[FollowUpConfig, ...] = (
    FollowUpConfig("tier_introduction", "tier_introduction", 60),
    FollowUpConfig("portal_guide", "portal_guide", 180),
)


@dataclass(frozen=True)
class OnboardingConfig:
    """Onboarding options; defaults mirror the standard welcome sequence."""

    send_welcome_email: bool = True
    welcome_template: str = "member_welcome"
    create_followup_task: bool = True
    followup_task_assignee: str = "membership_coordinator"
    followup_task_due_hours: int = 72
    follow_ups: tuple[FollowUpConfig, ...] = field(default=DEFAULT_FOLLOW_UPS)

    def __post_init__(self) -> None:
        # Deferred steps are looked up by name, so names must be unique.
        seen: set[str] = set()
        for follow_up in self.follow_ups:
            if follow_up.name in RESERVED_STEP_NAMES or follow_up.name in seen:
                raise ValidationException(
                    f"Duplicate or reserved onboarding step name '{follow_up.name}'",
                    field="follow_ups",
                )
            seen.add(follow_up.name)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["follow_ups"] = [asdict(f) for f in self.follow_ups]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "OnboardingConfig":
        """Build from a stored/requested mapping; missing keys keep their defaults."""
        if not data:
            return cls()
        values = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "follow_ups" in values:
            values["follow_ups"] = tuple(
                item if isinstance(item, FollowUpConfig) else FollowUpConfig(**item)
                for item in values["follow_ups"] or ()
            )
        return cls(**values)
