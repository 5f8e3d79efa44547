"""APSchedulerDelayedExecutor and run_continuation."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from app.infrastructure.services.delayed_executor import (
    APSchedulerDelayedExecutor,
    create_scheduler,
    run_continuation,
)
from app.shared.context import get_request_id
from tests.conftest import FIXED_NOW


def test_create_scheduler_is_not_started() -> None:
    scheduler = create_scheduler()
    assert isinstance(scheduler, AsyncIOScheduler)
    assert not scheduler.running


def test_schedule_after_adds_one_shot_job() -> None:
    scheduler = MagicMock()
    executor = APSchedulerDelayedExecutor(scheduler, clock=lambda: FIXED_NOW)
    continuation = AsyncMock()

    job_id = executor.schedule_after(timedelta(hours=1), continuation, name="automation:a1:l1")

    kwargs = scheduler.add_job.call_args.kwargs
    assert scheduler.add_job.call_args.args == (run_continuation,)
    assert kwargs["id"] == job_id
    assert kwargs["name"] == "automation:a1:l1"
    assert kwargs["args"] == [job_id, "automation:a1:l1", continuation]
    assert isinstance(kwargs["trigger"], DateTrigger)
    assert kwargs["trigger"].run_date == FIXED_NOW + timedelta(hours=1)


def test_negative_delay_runs_now() -> None:
    scheduler = MagicMock()
    executor = APSchedulerDelayedExecutor(scheduler, clock=lambda: FIXED_NOW)
    executor.schedule_after(timedelta(minutes=-5), AsyncMock())
    assert scheduler.add_job.call_args.kwargs["trigger"].run_date == FIXED_NOW


def test_pending_jobs() -> None:
    scheduler = MagicMock()
    scheduler.get_jobs.return_value = [object(), object()]
    assert APSchedulerDelayedExecutor(scheduler).pending_jobs() == 2


async def test_run_continuation_binds_job_request_id() -> None:
    seen: list[str | None] = []

    async def continuation() -> None:
        seen.append(get_request_id())

    await run_continuation("job1", "automation:a1:l1", continuation)
    assert seen == ["job-job1"]
    assert get_request_id() is None


async def test_run_continuation_logs_and_swallows_errors(caplog) -> None:
    continuation = AsyncMock(side_effect=RuntimeError("db down"))
    await run_continuation("job1", "onboarding:p1:portal_guide", continuation)
    continuation.assert_awaited_once()
    assert "Delayed job onboarding:p1:portal_guide failed" in caplog.text
