"""Process due scheduled automations once (cron entry point without HTTP).

Usage:
    uv run python -m scripts.process_due_automations [--wait]

Runs every active scheduled automation whose next_run has passed, each in
its own transaction, and prints the counts. Runs that suspend (wait steps,
delayed actions) need a live delayed executor: with --wait the script keeps
an in-process scheduler and stays up until every delayed job has run;
without it those runs are logged as failed.
Requires DATABASE_URL. Exit status 1 when any automation failed.
"""

import asyncio
import sys

import httpx

import app.infrastructure.persistence.database as database
from app.core.config import get_settings
from app.domain.exceptions import SqlNotConfiguredException
from app.infrastructure.services import (
    APSchedulerDelayedExecutor,
    AutomationRuntime,
    create_scheduler,
)
from app.shared.context import request_id_scope
from app.shared.telemetry.logging import setup_logging

POLL_SECONDS = 5.0


async def main() -> None:
    """One scheduler pass; optionally wait for delayed continuations."""
    wait = "--wait" in sys.argv[1:]
    settings = get_settings()
    setup_logging()
    try:
        session_factory = database.get_session_factory()
    except SqlNotConfiguredException as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)

    scheduler = create_scheduler() if wait else None
    async with httpx.AsyncClient(timeout=settings.action_timeout_seconds) as http_client:
        runtime = AutomationRuntime(
            settings,
            delayed_executor=APSchedulerDelayedExecutor(scheduler) if scheduler else None,
            http_client=http_client,
        )
        if scheduler is not None:
            scheduler.start()
        try:
            with request_id_scope("cron"):
                async with session_factory() as session:
                    result = await runtime.scheduler(session).process_due()
            print(
                f"Processed {result.processed}: {result.succeeded} succeeded, "
                f"{result.failed} failed, {result.skipped} skipped"
            )
            for automation_id in result.failed_automation_ids:
                print(f"  failed: {automation_id}")
            while scheduler is not None and scheduler.get_jobs():
                print(f"Waiting for {len(scheduler.get_jobs())} delayed job(s)...")
                await asyncio.sleep(POLL_SECONDS)
        finally:
            if scheduler is not None:
                scheduler.shutdown(wait=False)
            if database.engine is not None:
                await database.engine.dispose()

    if result.failed:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
