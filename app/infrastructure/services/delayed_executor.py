"""Delayed execution on APScheduler's AsyncIOScheduler.

Each continuation becomes a one-shot "date" job in the in-memory job store.
Jobs are lost on restart. A job that fires late (event loop busy, process
suspended) still runs: misfire_grace_time is unbounded.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, SessionTransaction

from app.application.interfaces.services import IDelayedExecutor
from app.shared.context import request_id_scope
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

logger = get_logger(__name__)

Continuation = Callable[[], Awaitable[Any]]


def create_scheduler() -> AsyncIOScheduler:
    """Build the process-wide scheduler (not started)."""
    return AsyncIOScheduler(
        jobstores={"default": MemoryJobStore()},
        job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": None},
        timezone="UTC",
    )


class APSchedulerDelayedExecutor:
    """IDelayedExecutor implementation over an AsyncIOScheduler."""

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._scheduler = scheduler
        self._clock = clock

    def schedule_after(
        self,
        delay: timedelta,
        continuation: Continuation,
        *,
        name: str | None = None,
        job_id: str | None = None,
    ) -> str:
        """Add a one-shot job running continuation at now + delay; return the job id."""
        job_id = job_id or generate_cuid()
        run_date = self._clock() + max(delay, timedelta(0))
        self._scheduler.add_job(
            run_continuation,
            trigger=DateTrigger(run_date=run_date),
            args=[job_id, name or job_id, continuation],
            id=job_id,
            name=name or job_id,
        )
        logger.debug("Scheduled %s at %s (job_id=%s)", name or job_id, run_date.isoformat(), job_id)
        return job_id

    def pending_jobs(self) -> int:
        return len(self._scheduler.get_jobs())


class CommitBoundDelayedExecutor:
    """IDelayedExecutor that hands jobs to inner only after the session commits.

    Jobs requested inside a transaction are held until its outermost commit;
    when the transaction rolls back they are dropped, so a continuation never
    runs for a run whose log row does not exist. Savepoint releases do not
    count as commits.
    """

    def __init__(self, session: AsyncSession, inner: IDelayedExecutor) -> None:
        self._session = session.sync_session
        self._inner = inner
        self._held: list[tuple[timedelta, Continuation, str | None, str]] = []
        self._listening = False

    def schedule_after(
        self,
        delay: timedelta,
        continuation: Continuation,
        *,
        name: str | None = None,
        job_id: str | None = None,
    ) -> str:
        job_id = job_id or generate_cuid()
        if not self._listening:
            event.listen(self._session, "after_commit", self._on_commit)
            event.listen(self._session, "after_transaction_end", self._on_transaction_end)
            self._listening = True
        self._held.append((delay, continuation, name, job_id))
        return job_id

    def _on_commit(self, session: Session) -> None:
        if session.in_nested_transaction():
            return
        held, self._held = self._held, []
        for delay, continuation, name, job_id in held:
            self._inner.schedule_after(delay, continuation, name=name, job_id=job_id)

    def _on_transaction_end(self, session: Session, transaction: SessionTransaction) -> None:
        if transaction.parent is not None or not self._held:
            return
        logger.warning(
            "Dropped %s delayed job(s) after rollback: %s",
            len(self._held),
            ", ".join(name or job_id for _, _, name, job_id in self._held),
        )
        self._held = []


async def run_continuation(job_id: str, name: str, continuation: Continuation) -> None:
    """Job body: run the continuation; errors are logged, never re-raised into APScheduler."""
    with request_id_scope(f"job-{job_id}"):
        try:
            await continuation()
        except Exception:
            logger.exception("Delayed job %s failed", name)
        else:
            logger.info("Delayed job %s finished", name)
