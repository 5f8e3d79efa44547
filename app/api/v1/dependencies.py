"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the automation runtime and the
use cases it builds. Routes depend only on these dependencies, not on infra
directly.

Session flavours:
- get_db: no transaction; used where the use case opens its own
  transactions (scheduler, dispatcher, member creation).
- get_db_transactional: one transaction for the request; used for CRUD
  and manual runs.
"""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.use_cases.automations import (
    AutomationDefinitionService,
    AutomationEngine,
    AutomationScheduler,
    AutomationStatsService,
    EventDispatcher,
)
from app.application.use_cases.onboarding import OnboardingWorkflow
from app.core.config import get_settings
from app.domain.exceptions import AuthenticationException
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import AutomationLogRepository
from app.infrastructure.services import AutomationRuntime

_cron_bearer = HTTPBearer(auto_error=False)


def get_automation_runtime(request: Request) -> AutomationRuntime:
    """Return the process runtime; outside the lifespan (tests, scripts) build one without delays."""
    runtime = getattr(request.app.state, "automation_runtime", None)
    if runtime is None:
        runtime = AutomationRuntime(get_settings())
        request.app.state.automation_runtime = runtime
    return runtime


RuntimeDep = Annotated[AutomationRuntime, Depends(get_automation_runtime)]


async def get_definition_service(
    db: Annotated[AsyncSession, Depends(get_db)], runtime: RuntimeDep
) -> AutomationDefinitionService:
    """Definitions service for reads."""
    return runtime.definitions(db)


async def get_definition_service_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)], runtime: RuntimeDep
) -> AutomationDefinitionService:
    """Definitions service for POST/PUT/DELETE (same transaction as request)."""
    return runtime.definitions(db)


async def get_engine_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)], runtime: RuntimeDep
) -> AutomationEngine:
    """Engine for manual runs; the run and its log commit with the request."""
    return runtime.engine(db)


async def get_scheduler(
    db: Annotated[AsyncSession, Depends(get_db)], runtime: RuntimeDep
) -> AutomationScheduler:
    """Scheduler; opens one transaction per due automation."""
    return runtime.scheduler(db)


async def get_dispatcher(
    db: Annotated[AsyncSession, Depends(get_db)], runtime: RuntimeDep
) -> EventDispatcher:
    """Event dispatcher; opens one transaction per matching automation."""
    return runtime.dispatcher(db)


async def get_stats_service(
    db: Annotated[AsyncSession, Depends(get_db)], runtime: RuntimeDep
) -> AutomationStatsService:
    return runtime.stats(db)


async def get_automation_log_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AutomationLogRepository:
    return AutomationLogRepository(db)


async def get_onboarding_workflow(
    db: Annotated[AsyncSession, Depends(get_db)], runtime: RuntimeDep
) -> OnboardingWorkflow:
    """Onboarding workflow for reads."""
    return runtime.onboarding(db)


async def get_onboarding_workflow_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)], runtime: RuntimeDep
) -> OnboardingWorkflow:
    """Onboarding workflow for POST (progress record commits with the request)."""
    return runtime.onboarding(db)


async def require_cron_secret(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_cron_bearer)],
) -> None:
    """Require Authorization: Bearer <CRON_SECRET>. Unset CRON_SECRET rejects every caller.

    Guards the machine-to-machine routes: the cron pass and event ingress.
    """
    expected = get_settings().cron_secret
    if expected is None or not expected.get_secret_value():
        raise AuthenticationException("Cron endpoint is disabled: CRON_SECRET is not set")
    if credentials is None or not secrets.compare_digest(
        credentials.credentials.encode(), expected.get_secret_value().encode()
    ):
        raise AuthenticationException("Invalid cron secret")
