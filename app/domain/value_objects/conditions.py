"""Trigger condition value objects.

Trigger conditions are stored as loosely-typed JSON. They are parsed into
FieldCondition (a field path, an operator and an expected value) or
UnknownCondition, which never matches.

Accepted stored shapes:

    {"tier": "gold"}                                  equality
    {"tier": ["silver", "gold"]}                      membership
    {"amount": {"op": "gte", "value": 100}}           comparator
    {"field": "tier", "op": "eq", "value": "gold"}    single structured condition
    [{"field": "tier", "op": "eq", "value": "gold"}]  list of structured conditions
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ComparisonOp(str, Enum):
    """Supported condition operators."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"
    EXISTS = "exists"


_STRUCTURED_KEYS = frozenset({"field", "op", "value"})


@dataclass(frozen=True)
class FieldCondition:
    """One condition on a (possibly dotted) context field."""

    field: str
    op: ComparisonOp
    value: Any


@dataclass(frozen=True)
class UnknownCondition:
    """A condition that could not be understood; evaluates to no match."""

    field: str | None
    reason: str


Condition = FieldCondition | UnknownCondition


def _structured(raw: Mapping[str, Any]) -> Condition:
    field = raw.get("field")
    if not isinstance(field, str) or not field:
        return UnknownCondition(None, "structured condition without a field name")
    return _with_op(field, raw.get("op", ComparisonOp.EQ.value), raw.get("value"))


def _with_op(field: str, op: Any, value: Any) -> Condition:
    try:
        return FieldCondition(field, ComparisonOp(op), value)
    except ValueError:
        return UnknownCondition(field, f"unknown operator {op!r}")


def _from_entry(field: str, expected: Any) -> Condition:
    if isinstance(expected, Mapping):
        if "op" not in expected:
            return UnknownCondition(field, "comparator without 'op'")
        return _with_op(field, expected["op"], expected.get("value"))
    if isinstance(expected, list | tuple):
        return FieldCondition(field, ComparisonOp.IN, list(expected))
    return FieldCondition(field, ComparisonOp.EQ, expected)


def parse_conditions(raw: Any) -> list[Condition]:
    """Parse stored trigger_conditions into a list of conditions.

    None or an empty mapping/list yields an empty list (always matches).
    Anything unparseable yields an UnknownCondition so evaluation fails closed.
    """
    if not raw:
        return []
    if isinstance(raw, Mapping):
        if "field" in raw and "op" in raw and set(raw) <= _STRUCTURED_KEYS:
            return [_structured(raw)]
        return [_from_entry(str(field), expected) for field, expected in raw.items()]
    if isinstance(raw, list):
        parsed: list[Condition] = []
        for item in raw:
            if isinstance(item, Mapping):
                parsed.append(_structured(item))
            else:
                parsed.append(UnknownCondition(None, f"condition is not an object: {item!r}"))
        return parsed
    return [UnknownCondition(None, f"unsupported conditions type {type(raw).__name__}")]
