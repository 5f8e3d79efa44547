"""Domain value objects and shared value types."""

from app.domain.value_objects.actions import (
    Action,
    CallExternalWorkflowAction,
    CreateTaskAction,
    SendEmailAction,
    UnknownAction,
    UpdateMemberFieldAction,
    WaitAction,
    parse_action,
    parse_actions,
)
from app.domain.value_objects.conditions import (
    ComparisonOp,
    Condition,
    FieldCondition,
    UnknownCondition,
    parse_conditions,
)
from app.domain.value_objects.core import Duration

__all__ = [
    "Action",
    "CallExternalWorkflowAction",
    "ComparisonOp",
    "Condition",
    "CreateTaskAction",
    "Duration",
    "FieldCondition",
    "SendEmailAction",
    "UnknownAction",
    "UnknownCondition",
    "UpdateMemberFieldAction",
    "WaitAction",
    "parse_action",
    "parse_actions",
    "parse_conditions",
]
