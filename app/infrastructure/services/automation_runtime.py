"""Automation runtime: builds engine, scheduler, dispatcher and onboarding per session.

One AutomationRuntime lives for the process (app.state.automation_runtime or
a script's main). It owns the long-lived collaborators (communication sender,
workflow invoker, delayed executor) and hands out use cases bound to a
session. Delayed continuations and onboarding steps come back through
resume_run / run_onboarding_step, each in a fresh session and transaction.

Sessions given to scheduler() and dispatcher() must not be inside a
transaction: they wrap each automation's run in session.begin().
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import TYPE_CHECKING

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.automation import RunContinuation, RunOutcome
from app.application.dtos.onboarding import OnboardingConfig
from app.application.interfaces.services import (
    ICommunicationSender,
    IDelayedExecutor,
    IExternalWorkflowInvoker,
)
from app.application.services.action_executor import ActionExecutor
from app.application.use_cases.automations import (
    AutomationDefinitionService,
    AutomationEngine,
    AutomationScheduler,
    AutomationStatsService,
    EventDispatcher,
)
from app.application.use_cases.onboarding import OnboardingWorkflow
from app.domain.entities.onboarding import OnboardingProgressEntity
from app.infrastructure.external.communications import create_communication_sender
from app.infrastructure.external.workflows import N8nWorkflowInvoker
from app.infrastructure.persistence.repositories import (
    AutomationLogRepository,
    AutomationRepository,
    MemberRepository,
    OnboardingProgressRepository,
    TaskRepository,
)
from app.infrastructure.services.delayed_executor import CommitBoundDelayedExecutor
from app.infrastructure.services.record_updater import SqlRecordUpdater
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.core.config import Settings

logger = get_logger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def _default_session_scope() -> AbstractAsyncContextManager[AsyncSession]:
    from app.infrastructure.persistence.database import session_scope

    return session_scope()


class AutomationRuntime:
    """Composition root for automation and onboarding use cases."""

    def __init__(
        self,
        settings: Settings,
        *,
        delayed_executor: IDelayedExecutor | None = None,
        http_client: httpx.AsyncClient | None = None,
        communication_sender: ICommunicationSender | None = None,
        workflow_invoker: IExternalWorkflowInvoker | None = None,
        session_scope: SessionScope = _default_session_scope,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.settings = settings
        self.delayed_executor = delayed_executor
        self.communication_sender = communication_sender or create_communication_sender(
            settings, http_client=http_client
        )
        self.workflow_invoker = workflow_invoker or N8nWorkflowInvoker(
            settings.n8n_base_url,
            api_key=settings.n8n_api_key.get_secret_value() if settings.n8n_api_key else None,
            http_client=http_client,
        )
        self._session_scope = session_scope
        self._clock = clock

    def _commit_bound(self, db: AsyncSession) -> IDelayedExecutor | None:
        """Delayed executor whose jobs start only once db's transaction commits."""
        if self.delayed_executor is None:
            return None
        return CommitBoundDelayedExecutor(db, self.delayed_executor)

    def action_executor(self, db: AsyncSession) -> ActionExecutor:
        return ActionExecutor(
            communication_sender=self.communication_sender,
            task_repo=TaskRepository(db),
            record_updater=SqlRecordUpdater(db),
            workflow_invoker=self.workflow_invoker,
            timeout_seconds=self.settings.action_timeout_seconds,
        )

    def engine(self, db: AsyncSession) -> AutomationEngine:
        return AutomationEngine(
            AutomationRepository(db),
            AutomationLogRepository(db),
            self.action_executor(db),
            delayed_executor=self._commit_bound(db),
            resume_runner=self.resume_run,
            clock=self._clock,
        )

    def scheduler(self, db: AsyncSession) -> AutomationScheduler:
        return AutomationScheduler(
            AutomationRepository(db),
            self.engine(db),
            run_scope=db.begin,
            clock=self._clock,
        )

    def dispatcher(self, db: AsyncSession) -> EventDispatcher:
        return EventDispatcher(AutomationRepository(db), self.engine(db), run_scope=db.begin)

    def definitions(self, db: AsyncSession) -> AutomationDefinitionService:
        return AutomationDefinitionService(AutomationRepository(db), clock=self._clock)

    def stats(self, db: AsyncSession) -> AutomationStatsService:
        return AutomationStatsService(AutomationLogRepository(db))

    def onboarding(self, db: AsyncSession) -> OnboardingWorkflow:
        return OnboardingWorkflow(
            OnboardingProgressRepository(db),
            MemberRepository(db),
            self.communication_sender,
            TaskRepository(db),
            delayed_executor=self._commit_bound(db),
            step_runner=self.run_onboarding_step,
            step_timeout_seconds=self.settings.action_timeout_seconds,
            clock=self._clock,
        )

    def onboarding_config(self) -> OnboardingConfig:
        """Default onboarding config with the configured welcome template."""
        return OnboardingConfig(welcome_template=self.settings.onboarding_welcome_template)

    async def resume_run(self, continuation: RunContinuation) -> RunOutcome:
        """Resume a suspended automation run in its own transaction."""
        async with self._session_scope() as db:
            return await self.engine(db).resume(continuation)

    async def run_onboarding_step(
        self, progress_id: str, step_name: str
    ) -> OnboardingProgressEntity | None:
        """Run one deferred onboarding step in its own transaction."""
        async with self._session_scope() as db:
            return await self.onboarding(db).run_step(progress_id, step_name)
