"""Trigger condition evaluation (pure; no I/O).

Decides whether an automation's trigger_conditions hold for a runtime
context. Misconfigured conditions fail closed with a warning instead of
raising, so one bad definition never breaks dispatch of the others.
"""

from collections.abc import Mapping
from typing import Any

from app.domain.entities.automation import AutomationEntity
from app.domain.value_objects.conditions import (
    ComparisonOp,
    FieldCondition,
    UnknownCondition,
)
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_MISSING = object()


def resolve_field(context: Mapping[str, Any], path: str) -> Any:
    """Return the value at a dotted path in context, or _MISSING."""
    current: Any = context
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _compare(op: ComparisonOp, actual: Any, expected: Any) -> bool:
    match op:
        case ComparisonOp.EQ:
            return actual == expected
        case ComparisonOp.NE:
            return actual != expected
        case ComparisonOp.GT:
            return actual > expected
        case ComparisonOp.GTE:
            return actual >= expected
        case ComparisonOp.LT:
            return actual < expected
        case ComparisonOp.LTE:
            return actual <= expected
        case ComparisonOp.IN:
            return actual in expected
        case ComparisonOp.NOT_IN:
            return actual not in expected
        case ComparisonOp.CONTAINS:
            return expected in actual
    raise TypeError(f"operator {op.value!r} is not a comparison")


class TriggerEvaluator:
    """Evaluates trigger conditions against a context."""

    def matches(self, automation: AutomationEntity, context: Mapping[str, Any]) -> bool:
        """Return True when every condition holds.

        Scheduled automations always match (the due-query decides). Empty
        conditions always match.
        """
        if automation.is_scheduled():
            return True
        for condition in automation.parsed_conditions():
            if not self._holds(automation, condition, context):
                return False
        return True

    def _holds(
        self,
        automation: AutomationEntity,
        condition: FieldCondition | UnknownCondition,
        context: Mapping[str, Any],
    ) -> bool:
        if isinstance(condition, UnknownCondition):
            logger.warning(
                "Invalid trigger condition in automation %s (%s); failing closed",
                automation.id,
                condition.reason,
            )
            return False

        actual = resolve_field(context, condition.field)
        if condition.op is ComparisonOp.EXISTS:
            present = actual is not _MISSING and actual is not None
            return present == bool(condition.value if condition.value is not None else True)
        if actual is _MISSING:
            logger.warning(
                "Unknown trigger condition key '%s' in automation %s; failing closed",
                condition.field,
                automation.id,
            )
            return False
        try:
            return bool(_compare(condition.op, actual, condition.value))
        except TypeError as e:
            logger.warning(
                "Trigger condition '%s' %s in automation %s cannot be evaluated (%s); failing closed",
                condition.field,
                condition.op.value,
                automation.id,
                e,
            )
            return False
