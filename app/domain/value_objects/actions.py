"""Action descriptor value objects.

An automation stores its actions as a list of JSON objects
``{"type": ..., "config": {...}, "delay": ...}``. parse_action() turns each
into a typed variant; anything that is not understood becomes an
UnknownAction, which the executor fails closed.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from app.domain.enums import ActionType
from app.domain.value_objects.core import Duration


@dataclass(frozen=True)
class SendEmailAction:
    """Send a templated communication to one recipient."""

    template: str | None
    to: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    delay: Duration | None = None
    type: str = ActionType.SEND_EMAIL.value


@dataclass(frozen=True)
class CreateTaskAction:
    """Create a staff task, optionally due after an offset."""

    title: str | None
    description: str | None = None
    assignee: str | None = None
    due_in: Duration | None = None
    delay: Duration | None = None
    type: str = ActionType.CREATE_TASK.value


@dataclass(frozen=True)
class UpdateMemberFieldAction:
    """Patch one field on the member the run concerns."""

    field: str | None
    value: Any = None
    delay: Duration | None = None
    type: str = ActionType.UPDATE_MEMBER_FIELD.value


@dataclass(frozen=True)
class WaitAction:
    """Suspend the run for a duration; the rest resumes later."""

    duration: Duration
    delay: Duration | None = None
    type: str = ActionType.WAIT.value


@dataclass(frozen=True)
class CallExternalWorkflowAction:
    """Invoke an external workflow by reference."""

    workflow: str | None
    payload: dict[str, Any] = field(default_factory=dict)
    delay: Duration | None = None
    type: str = ActionType.CALL_EXTERNAL_WORKFLOW.value


@dataclass(frozen=True)
class UnknownAction:
    """Unrecognised or malformed action; never executes."""

    type: str
    reason: str
    config: dict[str, Any] = field(default_factory=dict)
    delay: Duration | None = None


Action = (
    SendEmailAction
    | CreateTaskAction
    | UpdateMemberFieldAction
    | WaitAction
    | CallExternalWorkflowAction
    | UnknownAction
)


def _optional_str(value: Any) -> str | None:
    return str(value) if value is not None and value != "" else None


def parse_action(raw: Any) -> Action:
    """Parse one stored action descriptor into its typed variant."""
    if not isinstance(raw, Mapping):
        return UnknownAction("unknown", f"action is not an object: {raw!r}")
    action_type = str(raw.get("type") or "unknown")
    config = raw.get("config") or {}
    if not isinstance(config, Mapping):
        return UnknownAction(action_type, "config must be an object")
    config = dict(config)
    try:
        delay = Duration.parse_optional(raw.get("delay"))
    except ValueError as e:
        return UnknownAction(action_type, str(e), config)

    try:
        match action_type:
            case ActionType.SEND_EMAIL.value:
                data = config.get("data") or {}
                return SendEmailAction(
                    template=_optional_str(config.get("template")),
                    to=_optional_str(config.get("to")),
                    data=dict(data) if isinstance(data, Mapping) else {},
                    delay=delay,
                )
            case ActionType.CREATE_TASK.value:
                return CreateTaskAction(
                    title=_optional_str(config.get("title")),
                    description=_optional_str(config.get("description")),
                    assignee=_optional_str(config.get("assignee") or config.get("assigned_to")),
                    due_in=Duration.parse_optional(config.get("due_in")),
                    delay=delay,
                )
            case ActionType.UPDATE_MEMBER_FIELD.value:
                return UpdateMemberFieldAction(
                    field=_optional_str(config.get("field")),
                    value=config.get("value"),
                    delay=delay,
                )
            case ActionType.WAIT.value:
                duration = Duration.parse_optional(config.get("duration")) or delay
                if duration is None:
                    return UnknownAction(action_type, "wait requires a duration", config)
                return WaitAction(duration=duration)
            case ActionType.CALL_EXTERNAL_WORKFLOW.value:
                payload = config.get("payload") or {}
                return CallExternalWorkflowAction(
                    workflow=_optional_str(config.get("workflow") or config.get("workflow_name")),
                    payload=dict(payload) if isinstance(payload, Mapping) else {},
                    delay=delay,
                )
    except ValueError as e:
        return UnknownAction(action_type, str(e), config, delay)
    return UnknownAction(action_type, f"unknown action type {action_type!r}", config, delay)


def parse_actions(raw: Any) -> list[Action]:
    """Parse a stored action list, preserving order."""
    if not isinstance(raw, list):
        return []
    return [parse_action(item) for item in raw]
