"""Create, update and delete automation definitions with validation."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from app.application.dtos.automation import AutomationCreate
from app.domain.enums import ActionType, AutomationStatus, TriggerType
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.domain.value_objects.core import Duration
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from app.application.interfaces.repositories import IAutomationRepository
    from app.domain.entities.automation import AutomationEntity

logger = get_logger(__name__)

_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "trigger_type",
        "trigger_conditions",
        "actions",
        "status",
        "schedule_interval_seconds",
        "next_run",
        "continue_on_error",
    }
)


def validate_actions(actions: Any) -> None:
    """Raise ValidationException unless actions is a non-empty list of action objects.

    Unknown action types are accepted with a warning; they fail closed when run.
    """
    if not isinstance(actions, list) or not actions:
        raise ValidationException("At least one action is required", field="actions")
    for index, action in enumerate(actions):
        where = f"actions[{index}]"
        if not isinstance(action, Mapping):
            raise ValidationException(f"{where} must be an object", field=where)
        action_type = action.get("type")
        if not isinstance(action_type, str) or not action_type:
            raise ValidationException(f"{where}.type is required", field=f"{where}.type")
        config = action.get("config")
        if config is not None and not isinstance(config, Mapping):
            raise ValidationException(f"{where}.config must be an object", field=f"{where}.config")
        try:
            Duration.parse_optional(action.get("delay"))
        except ValueError as e:
            raise ValidationException(str(e), field=f"{where}.delay") from e
        if action_type not in ActionType.values():
            logger.warning(
                "Automation action %s has unknown type '%s'; it will fail when run",
                where,
                action_type,
            )


def _validate(data: AutomationCreate) -> None:
    if not data.name or not data.name.strip():
        raise ValidationException("Name is required", field="name")
    if data.trigger_type not in TriggerType.values():
        raise ValidationException(
            f"Unknown trigger type '{data.trigger_type}'", field="trigger_type"
        )
    if data.status not in AutomationStatus.values():
        raise ValidationException(f"Unknown status '{data.status}'", field="status")
    if data.trigger_conditions is not None and not isinstance(
        data.trigger_conditions, dict | list
    ):
        raise ValidationException(
            "trigger_conditions must be an object or a list", field="trigger_conditions"
        )
    validate_actions(data.actions)
    scheduled = data.trigger_type == TriggerType.SCHEDULED.value
    if scheduled and not (data.schedule_interval_seconds and data.schedule_interval_seconds > 0):
        raise ValidationException(
            "Scheduled automations require a positive schedule_interval_seconds",
            field="schedule_interval_seconds",
        )
    if not scheduled and (data.schedule_interval_seconds or data.next_run):
        raise ValidationException(
            "schedule_interval_seconds and next_run apply only to scheduled automations",
            field="schedule_interval_seconds",
        )


class AutomationDefinitionService:
    """Validated CRUD over automation definitions."""

    def __init__(
        self,
        automation_repo: IAutomationRepository,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._automation_repo = automation_repo
        self._clock = clock

    async def get(self, automation_id: str) -> AutomationEntity:
        automation = await self._automation_repo.get_by_id(automation_id)
        if automation is None:
            raise ResourceNotFoundException("automation", automation_id)
        return automation

    async def list(
        self,
        *,
        trigger_type: str | None = None,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AutomationEntity]:
        return await self._automation_repo.list_automations(
            trigger_type=trigger_type, status=status, skip=skip, limit=limit
        )

    async def create(self, data: AutomationCreate) -> AutomationEntity:
        """Validate and create. Scheduled automations first run one interval from now."""
        data = replace(data, name=(data.name or "").strip(), next_run=ensure_utc(data.next_run))
        _validate(data)
        if data.trigger_type == TriggerType.SCHEDULED.value and data.next_run is None:
            data = replace(
                data,
                next_run=self._clock() + timedelta(seconds=data.schedule_interval_seconds or 0),
            )
        automation = await self._automation_repo.create(data)
        logger.info(
            "Created automation %s (%s, trigger=%s)",
            automation.id,
            automation.name,
            automation.trigger_type,
        )
        return automation

    async def update(self, automation_id: str, patch: dict[str, Any]) -> AutomationEntity:
        """Validate the merged definition and apply the patch.

        Switching away from 'scheduled' clears the schedule; switching to it
        without a next_run schedules the first run one interval from now.
        """
        current = await self.get(automation_id)
        unknown = set(patch) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        changes = dict(patch)
        if "name" in changes and isinstance(changes["name"], str):
            changes["name"] = changes["name"].strip()
        if "next_run" in changes:
            changes["next_run"] = ensure_utc(changes["next_run"])

        trigger_type = changes.get("trigger_type", current.trigger_type)
        if trigger_type != TriggerType.SCHEDULED.value:
            if current.is_scheduled():
                changes.setdefault("schedule_interval_seconds", None)
                changes.setdefault("next_run", None)

        merged = AutomationCreate(
            name=changes.get("name", current.name),
            trigger_type=trigger_type,
            actions=changes.get("actions", current.actions),
            description=changes.get("description", current.description),
            trigger_conditions=changes.get("trigger_conditions", current.trigger_conditions),
            status=changes.get("status", current.status),
            schedule_interval_seconds=changes.get(
                "schedule_interval_seconds", current.schedule_interval_seconds
            ),
            next_run=changes.get("next_run", current.next_run),
            continue_on_error=changes.get("continue_on_error", current.continue_on_error),
            created_by=current.created_by,
        )
        _validate(merged)
        if merged.trigger_type == TriggerType.SCHEDULED.value and merged.next_run is None:
            changes["next_run"] = self._clock() + timedelta(
                seconds=merged.schedule_interval_seconds or 0
            )

        updated = await self._automation_repo.update(automation_id, changes)
        if updated is None:
            raise ResourceNotFoundException("automation", automation_id)
        return updated

    async def delete(self, automation_id: str) -> None:
        """Delete the definition; its run logs are retained."""
        if not await self._automation_repo.delete(automation_id):
            raise ResourceNotFoundException("automation", automation_id)
        logger.info("Deleted automation %s", automation_id)
