"""Automation runs end to end on SQLite: dispatcher, scheduler and delayed continuations."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from app.application.dtos.automation import AutomationCreate
from app.infrastructure.persistence.repositories import (
    AutomationLogRepository,
    AutomationRepository,
    MemberRepository,
)
from app.infrastructure.services import AutomationRuntime, CommitBoundDelayedExecutor

PAST = datetime(2020, 1, 1, tzinfo=UTC)


async def _seed_member(session_factory):
    async with session_factory() as session:
        async with session.begin():
            return await MemberRepository(session).create(
                "Ada", "Lovelace", email="ada@example.org", tier="gold"
            )


async def _seed_automation(session_factory, **values):
    async with session_factory() as session:
        async with session.begin():
            return await AutomationRepository(session).create(AutomationCreate(**values))


async def _reload(session_factory, automation_id: str):
    async with session_factory() as session:
        automation = await AutomationRepository(session).get_by_id(automation_id)
        logs = await AutomationLogRepository(session).list_logs(automation_id=automation_id)
        return automation, logs


class TestFailedDatabaseWrite:
    """An action whose write is rejected by the database fails only itself."""

    async def test_dispatch_still_logs_and_counts(self, runtime, session_factory) -> None:
        member = await _seed_member(session_factory)
        automation = await _seed_automation(
            session_factory,
            name="Clear Name",
            trigger_type="member_created",
            actions=[
                {"type": "update_member_field", "config": {"field": "first_name", "value": None}}
            ],
        )

        async with session_factory() as session:
            outcomes = await runtime.dispatcher(session).dispatch(
                "member_created", member.to_context()
            )

        (outcome,) = outcomes
        assert outcome.status == "failed"
        assert outcome.failed_action_type == "update_member_field"
        reloaded, logs = await _reload(session_factory, automation.id)
        assert reloaded.run_count == 1
        assert [(log.status, log.success) for log in logs] == [("failed", False)]
        async with session_factory() as session:
            assert (await MemberRepository(session).get_by_id(member.id)).first_name == "Ada"

    async def test_later_actions_still_write(self, runtime, session_factory) -> None:
        member = await _seed_member(session_factory)
        automation = await _seed_automation(
            session_factory,
            name="Clear Name Then Call",
            trigger_type="member_created",
            continue_on_error=True,
            actions=[
                {"type": "update_member_field", "config": {"field": "first_name", "value": None}},
                {"type": "create_task", "config": {"title": "Call new member"}},
            ],
        )

        async with session_factory() as session:
            (outcome,) = await runtime.dispatcher(session).dispatch(
                "member_created", member.to_context()
            )

        assert (outcome.actions_executed, outcome.actions_failed) == (2, 1)
        assert outcome.action_results[1].ok
        _, (log,) = await _reload(session_factory, automation.id)
        assert log.actions_failed == 1
        assert log.action_results[1]["detail"]["task_id"]

    async def test_manual_run_returns_outcome(self, api_client, session_factory) -> None:
        member = await _seed_member(session_factory)
        automation = await _seed_automation(
            session_factory,
            name="Clear Name",
            trigger_type="member_created",
            actions=[
                {"type": "update_member_field", "config": {"field": "last_name", "value": None}}
            ],
        )

        response = await api_client.post(
            f"/api/v1/automations/{automation.id}/run",
            json={"context": member.to_context()},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        reloaded, logs = await _reload(session_factory, automation.id)
        assert reloaded.run_count == 1
        assert len(logs) == 1


async def test_scheduled_failure_advances_schedule_and_logs_cause(
    runtime, session_factory
) -> None:
    automation = await _seed_automation(
        session_factory,
        name="Weekly Digest",
        trigger_type="scheduled",
        actions=[{"type": "send_email", "config": {"template": "weekly_digest"}}],
        schedule_interval_seconds=7 * 24 * 3600,
        next_run=PAST,
    )

    async with session_factory() as session:
        result = await runtime.scheduler(session).process_due()

    assert (result.processed, result.succeeded, result.failed) == (1, 0, 1)
    assert result.failed_automation_ids == (automation.id,)
    reloaded, (log,) = await _reload(session_factory, automation.id)
    assert reloaded.next_run == PAST + timedelta(days=7)
    assert reloaded.run_count == 1
    assert log.success is False
    assert "no recipient" in log.error_message

    async with session_factory() as session:
        again = await runtime.scheduler(session).process_due(now=PAST + timedelta(days=1))
    assert again.processed == 0


class TestCommitBoundDelayedExecutor:
    async def test_jobs_start_after_commit(self, session_factory) -> None:
        inner = MagicMock()
        async with session_factory() as session:
            delayed = CommitBoundDelayedExecutor(session, inner)
            async with session.begin():
                job_id = delayed.schedule_after(timedelta(minutes=5), MagicMock(), name="job-a")
                async with session.begin_nested():
                    pass
                inner.schedule_after.assert_not_called()

        inner.schedule_after.assert_called_once()
        assert inner.schedule_after.call_args.kwargs == {"name": "job-a", "job_id": job_id}

    async def test_jobs_dropped_on_rollback(self, session_factory) -> None:
        inner = MagicMock()
        async with session_factory() as session:
            delayed = CommitBoundDelayedExecutor(session, inner)
            with pytest.raises(RuntimeError):
                async with session.begin():
                    delayed.schedule_after(timedelta(minutes=5), MagicMock())
                    raise RuntimeError("commit failed")
            async with session.begin():
                pass

        inner.schedule_after.assert_not_called()

    async def test_suspended_run_schedules_after_commit(self, session_factory, sender) -> None:
        inner = MagicMock()
        runtime = AutomationRuntime(
            MagicMock(action_timeout_seconds=5.0),
            delayed_executor=inner,
            communication_sender=sender,
            workflow_invoker=MagicMock(),
        )
        automation = await _seed_automation(
            session_factory,
            name="Two Step Welcome",
            trigger_type="member_created",
            actions=[
                {"type": "send_email", "config": {"template": "welcome"}},
                {"type": "wait", "config": {"duration": "2 days"}},
                {"type": "send_email", "config": {"template": "check_in"}},
            ],
        )

        async with session_factory() as session:
            async with session.begin():
                engine = runtime.engine(session)
                stored = await AutomationRepository(session).get_by_id(automation.id)
                outcome = await engine.run(stored, {"email": "ada@example.org"})
                assert outcome.status == "suspended"
                inner.schedule_after.assert_not_called()

        assert inner.schedule_after.call_args.args[0] == timedelta(days=2)
        assert inner.schedule_after.call_args.kwargs["name"] == (
            f"automation:{automation.id}:{outcome.log_id}"
        )
