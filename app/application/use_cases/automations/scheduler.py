"""Process due scheduled automations (one pass, driven by an external caller)."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager, nullcontext
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.application.dtos.automation import ProcessDueResult
from app.domain.enums import TriggerType
from app.shared.enums import RunStatus
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.interfaces.repositories import IAutomationRepository
    from app.application.use_cases.automations.engine import AutomationEngine

logger = get_logger(__name__)

RunScope = Callable[[], AbstractAsyncContextManager[Any]]

MAX_FAILED_AUTOMATION_IDS = 50


class AutomationScheduler:
    """Runs every due scheduled automation once, earliest next_run first.

    Holds no state between passes. Each automation runs inside its own
    run_scope (a transaction in production), so a failure rolls back and is
    counted for that automation only; the pass continues with the rest.
    """

    def __init__(
        self,
        automation_repo: IAutomationRepository,
        engine: AutomationEngine,
        *,
        run_scope: RunScope = nullcontext,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._automation_repo = automation_repo
        self._engine = engine
        self._run_scope = run_scope
        self._clock = clock

    async def process_due(self, now: datetime | None = None) -> ProcessDueResult:
        """Run all automations due at `now` and return aggregate counts.

        Args:
            now: Reference time for the due-query; defaults to the current UTC time.

        Returns:
            ProcessDueResult with processed/succeeded/failed/skipped counts.
            Suspended runs count as succeeded.
        """
        now = now or self._clock()
        async with self._run_scope():
            due = await self._automation_repo.list_due(now)

        processed = succeeded = failed = skipped = 0
        failed_ids: list[str] = []
        context = {"now": now.isoformat(), "trigger_type": TriggerType.SCHEDULED.value}

        for automation in due:
            processed += 1
            try:
                async with self._run_scope():
                    outcome = await self._engine.run(automation, dict(context))
            except Exception:
                logger.exception("Scheduled automation %s failed", automation.id)
                failed += 1
                if len(failed_ids) < MAX_FAILED_AUTOMATION_IDS:
                    failed_ids.append(automation.id)
                continue
            if outcome.status == RunStatus.SKIPPED.value:
                skipped += 1
            elif outcome.success:
                succeeded += 1
            else:
                failed += 1
                if len(failed_ids) < MAX_FAILED_AUTOMATION_IDS:
                    failed_ids.append(automation.id)

        if processed:
            logger.info(
                "Processed %s due automation(s): %s succeeded, %s failed, %s skipped",
                processed,
                succeeded,
                failed,
                skipped,
            )
        return ProcessDueResult(
            processed=processed,
            succeeded=succeeded,
            failed=failed,
            skipped=skipped,
            failed_automation_ids=tuple(failed_ids),
        )
