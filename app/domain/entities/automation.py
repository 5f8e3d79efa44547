"""Automation domain entity.

An automation is a definition: a trigger (type + conditions), an ordered
action list and, for scheduled automations, a fixed-interval schedule.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from app.domain.enums import AutomationStatus, TriggerType
from app.domain.value_objects import Action, Condition, parse_actions, parse_conditions


@dataclass
class AutomationEntity:
    """Domain entity for an automation definition."""

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
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_active(self) -> bool:
        return self.status == AutomationStatus.ACTIVE.value

    def is_scheduled(self) -> bool:
        return self.trigger_type == TriggerType.SCHEDULED.value

    def can_trigger_on(self, trigger_type: str) -> bool:
        """Return whether this automation is active and listens for trigger_type."""
        return self.is_active() and self.trigger_type == trigger_type

    def schedule_interval(self) -> timedelta | None:
        if not self.is_scheduled() or not self.schedule_interval_seconds:
            return None
        return timedelta(seconds=self.schedule_interval_seconds)

    def following_run(self, fallback: datetime) -> datetime | None:
        """Return next_run advanced by one interval.

        The base is the stored next_run, not the time the run actually
        happens, so late processing never shifts the schedule. fallback is
        used only when next_run was never set.
        """
        interval = self.schedule_interval()
        if interval is None:
            return None
        return (self.next_run or fallback) + interval

    def parsed_actions(self) -> list[Action]:
        return parse_actions(self.actions)

    def parsed_conditions(self) -> list[Condition]:
        return parse_conditions(self.trigger_conditions)
