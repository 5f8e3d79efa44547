"""AutomationScheduler and EventDispatcher unit tests."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.automation import RunOutcome
from app.application.use_cases.automations import (
    AutomationScheduler,
    EventDispatcher,
    dispatch_safely,
)
from tests.conftest import FIXED_NOW, make_automation


def _outcome(automation_id: str, status: str = "completed", success: bool = True) -> RunOutcome:
    return RunOutcome(
        automation_id=automation_id,
        status=status,
        success=success,
        actions_executed=1 if success else 0,
        actions_failed=0 if success else 1,
    )


class ScopeRecorder:
    """run_scope stand-in counting how many scopes were opened and exited with an error."""

    def __init__(self) -> None:
        self.opened = 0
        self.failed = 0

    @asynccontextmanager
    async def __call__(self):
        self.opened += 1
        try:
            yield
        except Exception:
            self.failed += 1
            raise


def _scheduled(automation_id: str):
    return make_automation(
        id=automation_id,
        trigger_type="scheduled",
        schedule_interval_seconds=3600,
        next_run=FIXED_NOW,
    )


class TestAutomationScheduler:
    async def test_counts_every_outcome(self) -> None:
        repo = AsyncMock()
        repo.list_due = AsyncMock(
            return_value=[_scheduled("ok"), _scheduled("boom"), _scheduled("bad"), _scheduled("dup")]
        )
        engine = AsyncMock()
        engine.run.side_effect = [
            _outcome("ok"),
            RuntimeError("db went away"),
            _outcome("bad", status="failed", success=False),
            _outcome("dup", status="skipped", success=False),
        ]
        scope = ScopeRecorder()
        scheduler = AutomationScheduler(repo, engine, run_scope=scope, clock=lambda: FIXED_NOW)

        result = await scheduler.process_due()

        assert result.processed == 4
        assert result.succeeded == 1
        assert result.failed == 2
        assert result.skipped == 1
        assert result.failed_automation_ids == ("boom", "bad")
        repo.list_due.assert_awaited_once_with(FIXED_NOW)
        # One scope for the due-query plus one per automation.
        assert scope.opened == 5
        assert scope.failed == 1

    async def test_suspended_counts_as_success(self) -> None:
        repo = AsyncMock()
        repo.list_due = AsyncMock(return_value=[_scheduled("a")])
        engine = AsyncMock()
        engine.run.return_value = _outcome("a", status="suspended")
        result = await AutomationScheduler(repo, engine).process_due(FIXED_NOW)
        assert (result.processed, result.succeeded, result.failed) == (1, 1, 0)

    async def test_nothing_due(self) -> None:
        repo = AsyncMock()
        repo.list_due = AsyncMock(return_value=[])
        engine = AsyncMock()
        result = await AutomationScheduler(repo, engine).process_due(FIXED_NOW)
        assert (result.processed, result.succeeded, result.failed, result.skipped) == (0, 0, 0, 0)
        engine.run.assert_not_awaited()

    async def test_context_carries_reference_time(self) -> None:
        repo = AsyncMock()
        repo.list_due = AsyncMock(return_value=[_scheduled("a")])
        engine = AsyncMock()
        engine.run.return_value = _outcome("a")
        await AutomationScheduler(repo, engine).process_due(FIXED_NOW)
        context = engine.run.await_args.args[1]
        assert context == {"now": FIXED_NOW.isoformat(), "trigger_type": "scheduled"}


class TestEventDispatcher:
    @pytest.fixture
    def repo(self) -> AsyncMock:
        repo = AsyncMock()
        repo.list_for_trigger = AsyncMock(
            return_value=[
                make_automation(id="any", trigger_type="donation_received"),
                make_automation(
                    id="major",
                    trigger_type="donation_received",
                    trigger_conditions={"amount": {"op": "gte", "value": 1000}},
                ),
            ]
        )
        return repo

    async def test_runs_only_matching_automations(self, repo) -> None:
        engine = AsyncMock()
        engine.run.side_effect = lambda automation, context: _outcome(automation.id)
        dispatcher = EventDispatcher(repo, engine)

        outcomes = await dispatcher.dispatch("donation_received", {"amount": 50})

        assert [o.automation_id for o in outcomes] == ["any"]
        repo.list_for_trigger.assert_awaited_once_with("donation_received")

    async def test_failure_does_not_stop_others(self, repo) -> None:
        engine = AsyncMock()
        engine.run.side_effect = [RuntimeError("first failed"), _outcome("major")]
        scope = ScopeRecorder()
        dispatcher = EventDispatcher(repo, engine, run_scope=scope)

        outcomes = await dispatcher.dispatch("donation_received", {"amount": 5000})

        assert [o.automation_id for o in outcomes] == ["major"]
        assert engine.run.await_count == 2
        assert scope.failed == 1

    async def test_each_run_gets_its_own_context_copy(self, repo) -> None:
        seen: list[dict] = []

        async def run(automation, context):
            context["mutated_by"] = automation.id
            seen.append(context)
            return _outcome(automation.id)

        engine = AsyncMock()
        engine.run.side_effect = run
        original = {"amount": 5000}
        await EventDispatcher(repo, engine).dispatch("donation_received", original)

        assert original == {"amount": 5000}
        assert seen[0] is not seen[1]

    async def test_scheduled_and_unknown_triggers_are_ignored(self, repo) -> None:
        engine = AsyncMock()
        dispatcher = EventDispatcher(repo, engine)
        assert await dispatcher.dispatch("scheduled", {}) == []
        assert await dispatcher.dispatch("moon_phase", {}) == []
        repo.list_for_trigger.assert_not_awaited()


class TestDispatchSafely:
    async def test_swallows_dispatch_errors(self, caplog) -> None:
        dispatcher = AsyncMock()
        dispatcher.dispatch.side_effect = RuntimeError("database is down")
        assert await dispatch_safely(dispatcher, "member_created", {"member_id": "m1"}) == []
        assert "Automation dispatch failed for trigger member_created" in caplog.text

    async def test_no_dispatcher(self) -> None:
        assert await dispatch_safely(None, "member_created", {}) == []

    async def test_returns_outcomes(self) -> None:
        dispatcher = AsyncMock()
        dispatcher.dispatch.return_value = [_outcome("a")]
        outcomes = await dispatch_safely(dispatcher, "member_created", {})
        assert [o.automation_id for o in outcomes] == ["a"]
