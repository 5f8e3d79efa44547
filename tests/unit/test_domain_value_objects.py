"""Tests for domain value objects (Duration, conditions, action descriptors)."""

from datetime import timedelta

import pytest

from app.domain.value_objects.actions import (
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
    FieldCondition,
    UnknownCondition,
    parse_conditions,
)
from app.domain.value_objects.core import Duration


class TestDuration:
    """Duration: seconds or '<number> <unit>' strings, never negative."""

    @pytest.mark.parametrize(
        ("raw", "seconds"),
        [
            (90, 90.0),
            (2.5, 2.5),
            ("45s", 45.0),
            ("90 minutes", 5400.0),
            ("24 hours", 86400.0),
            ("3 days", 259200.0),
            ("1 week", 604800.0),
            ("2.5 h", 9000.0),
            ("  10 MIN ", 600.0),
        ],
    )
    def test_parse(self, raw, seconds) -> None:
        assert Duration.parse(raw).seconds == seconds

    @pytest.mark.parametrize("raw", ["soon", "3 fortnights", "-5", "", True, None, [1]])
    def test_parse_rejects_invalid(self, raw) -> None:
        with pytest.raises(ValueError, match="Invalid duration"):
            Duration.parse(raw)

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            Duration(-1)

    def test_parse_optional_passes_none(self) -> None:
        assert Duration.parse_optional(None) is None
        assert Duration.parse_optional("1 hour") == Duration(3600)

    def test_as_timedelta_and_zero(self) -> None:
        assert Duration.parse("2 hours").as_timedelta() == timedelta(hours=2)
        assert Duration(0).is_zero
        assert not Duration(1).is_zero


class TestParseConditions:
    """Stored trigger_conditions shapes become FieldCondition or UnknownCondition."""

    def test_empty_yields_no_conditions(self) -> None:
        assert parse_conditions(None) == []
        assert parse_conditions({}) == []
        assert parse_conditions([]) == []

    def test_equality_and_membership(self) -> None:
        parsed = parse_conditions({"tier": "gold", "status": ["active", "pending"]})
        assert parsed == [
            FieldCondition("tier", ComparisonOp.EQ, "gold"),
            FieldCondition("status", ComparisonOp.IN, ["active", "pending"]),
        ]

    def test_comparator(self) -> None:
        assert parse_conditions({"amount": {"op": "gte", "value": 100}}) == [
            FieldCondition("amount", ComparisonOp.GTE, 100)
        ]

    def test_single_structured_condition(self) -> None:
        assert parse_conditions({"field": "tier", "op": "eq", "value": "gold"}) == [
            FieldCondition("tier", ComparisonOp.EQ, "gold")
        ]

    def test_list_of_structured_conditions(self) -> None:
        parsed = parse_conditions(
            [
                {"field": "amount", "op": "gt", "value": 10},
                {"field": "donor.tier", "value": "gold"},
            ]
        )
        assert parsed == [
            FieldCondition("amount", ComparisonOp.GT, 10),
            FieldCondition("donor.tier", ComparisonOp.EQ, "gold"),
        ]

    def test_unknown_operator_fails_closed(self) -> None:
        (condition,) = parse_conditions({"amount": {"op": "between", "value": [1, 2]}})
        assert isinstance(condition, UnknownCondition)
        assert "between" in condition.reason

    def test_comparator_without_op(self) -> None:
        (condition,) = parse_conditions({"amount": {"value": 5}})
        assert isinstance(condition, UnknownCondition)

    def test_structured_without_field(self) -> None:
        (condition,) = parse_conditions([{"op": "eq", "value": 1}])
        assert isinstance(condition, UnknownCondition)

    def test_non_object_list_item(self) -> None:
        (condition,) = parse_conditions(["tier=gold"])
        assert isinstance(condition, UnknownCondition)

    def test_unsupported_type(self) -> None:
        (condition,) = parse_conditions("tier=gold")
        assert isinstance(condition, UnknownCondition)


class TestParseAction:
    """Action descriptors parse into typed variants; anything else is UnknownAction."""

    def test_send_email(self) -> None:
        action = parse_action(
            {
                "type": "send_email",
                "config": {"template": "welcome", "to": "a@b.org", "data": {"x": 1}},
                "delay": "1 hour",
            }
        )
        assert action == SendEmailAction(
            template="welcome", to="a@b.org", data={"x": 1}, delay=Duration(3600)
        )

    def test_create_task_accepts_assigned_to(self) -> None:
        action = parse_action(
            {
                "type": "create_task",
                "config": {"title": "Call", "assigned_to": "dev_team", "due_in": "2 days"},
            }
        )
        assert isinstance(action, CreateTaskAction)
        assert action.assignee == "dev_team"
        assert action.due_in == Duration(172800)

    def test_update_member_field(self) -> None:
        action = parse_action(
            {"type": "update_member_field", "config": {"field": "tier", "value": "gold"}}
        )
        assert action == UpdateMemberFieldAction(field="tier", value="gold")

    def test_wait_from_config_or_delay(self) -> None:
        assert parse_action({"type": "wait", "config": {"duration": "3 days"}}) == WaitAction(
            duration=Duration(259200)
        )
        assert parse_action({"type": "wait", "delay": 60}) == WaitAction(duration=Duration(60))

    def test_wait_without_duration_is_unknown(self) -> None:
        action = parse_action({"type": "wait"})
        assert isinstance(action, UnknownAction)
        assert "duration" in action.reason

    def test_external_workflow_accepts_workflow_name(self) -> None:
        action = parse_action(
            {"type": "call_external_workflow", "config": {"workflow_name": "sync-crm"}}
        )
        assert isinstance(action, CallExternalWorkflowAction)
        assert action.workflow == "sync-crm"

    def test_unknown_type(self) -> None:
        action = parse_action({"type": "send_fax", "config": {"number": "1"}})
        assert isinstance(action, UnknownAction)
        assert action.type == "send_fax"
        assert "unknown action type" in action.reason

    def test_bad_delay_is_unknown(self) -> None:
        action = parse_action({"type": "send_email", "delay": "whenever"})
        assert isinstance(action, UnknownAction)

    def test_non_object(self) -> None:
        assert isinstance(parse_action("send_email"), UnknownAction)

    def test_config_must_be_object(self) -> None:
        assert isinstance(parse_action({"type": "send_email", "config": [1]}), UnknownAction)

    def test_parse_actions_keeps_order(self) -> None:
        actions = parse_actions(
            [{"type": "wait", "delay": 1}, {"type": "send_email", "config": {"template": "t"}}]
        )
        assert [a.type for a in actions] == ["wait", "send_email"]
        assert parse_actions(None) == []
