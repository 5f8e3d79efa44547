"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (logging, shared HTTP client,
delayed-execution scheduler, automation runtime, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.services import (
    APSchedulerDelayedExecutor,
    AutomationRuntime,
    create_scheduler,
)
from app.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, shared HTTP client, APScheduler, automation runtime.
    Shutdown order: scheduler (pending continuations are dropped), HTTP client
    close, SQL engine dispose.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    # Shared HTTP client for mail API and n8n calls (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.action_timeout_seconds)

    scheduler = create_scheduler()
    scheduler.start()
    app.state.scheduler = scheduler
    app.state.automation_runtime = AutomationRuntime(
        settings,
        delayed_executor=APSchedulerDelayedExecutor(scheduler),
        http_client=app.state.http_client,
    )
    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    if getattr(app.state, "scheduler", None) is not None:
        pending = len(app.state.scheduler.get_jobs())
        app.state.scheduler.shutdown(wait=False)
        app.state.scheduler = None
        if pending:
            logger.warning("Scheduler stopped with %s pending delayed job(s) dropped", pending)
        else:
            logger.info("Scheduler stopped")

    app.state.automation_runtime = None

    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("HTTP client closed")

    from app.infrastructure.persistence import database

    if getattr(database, "engine", None) is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
