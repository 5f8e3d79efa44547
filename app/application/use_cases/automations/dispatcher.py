"""Dispatch domain events to matching automations.

Call dispatch_safely() from domain code only after the triggering change
has been committed; it never raises, so automation failures cannot fail or
roll back the business operation.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager, nullcontext
from typing import TYPE_CHECKING, Any

from app.application.services.trigger_evaluator import TriggerEvaluator
from app.domain.enums import TriggerType
from app.domain.exceptions import ValidationException
from app.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from app.application.dtos.automation import RunOutcome
    from app.application.interfaces.repositories import IAutomationRepository
    from app.application.use_cases.automations.engine import AutomationEngine

logger = get_logger(__name__)

RunScope = Callable[[], AbstractAsyncContextManager[Any]]


def ensure_event_trigger(trigger_type: str) -> None:
    """Raise ValidationException unless trigger_type is a dispatchable event."""
    if trigger_type not in TriggerType.values():
        raise ValidationException(
            f"Unknown trigger type '{trigger_type}'", field="trigger_type"
        )
    if trigger_type == TriggerType.SCHEDULED.value:
        raise ValidationException(
            "Scheduled automations are run by the scheduler, not by events",
            field="trigger_type",
        )


class EventDispatcher:
    """Finds active automations for a trigger type, filters by conditions, runs each."""

    def __init__(
        self,
        automation_repo: IAutomationRepository,
        engine: AutomationEngine,
        *,
        evaluator: TriggerEvaluator | None = None,
        run_scope: RunScope = nullcontext,
    ) -> None:
        self._automation_repo = automation_repo
        self._engine = engine
        self._evaluator = evaluator or TriggerEvaluator()
        self._run_scope = run_scope

    async def dispatch(self, trigger_type: str, context: dict[str, Any]) -> list[RunOutcome]:
        """Run every matching automation; one failing run does not stop the others."""
        if trigger_type == TriggerType.SCHEDULED.value:
            logger.warning("Scheduled automations are run by the scheduler, not dispatched")
            return []
        if trigger_type not in TriggerType.values():
            logger.warning("Dispatch for unknown trigger type '%s' ignored", trigger_type)
            return []

        async with self._run_scope():
            automations = await self._automation_repo.list_for_trigger(trigger_type)

        outcomes: list[RunOutcome] = []
        for automation in automations:
            if not self._evaluator.matches(automation, context):
                continue
            try:
                async with self._run_scope():
                    outcome = await self._engine.run(automation, dict(context))
            except Exception:
                logger.exception(
                    "Automation %s failed for trigger %s (member_id=%s)",
                    automation.id,
                    trigger_type,
                    context.get("member_id"),
                )
                continue
            outcomes.append(outcome)
        return outcomes


async def dispatch_safely(
    dispatcher: EventDispatcher | None,
    trigger_type: str,
    context: dict[str, Any],
) -> list[RunOutcome]:
    """Dispatch and swallow every error (logged); returns [] on failure."""
    if dispatcher is None:
        return []
    try:
        return await dispatcher.dispatch(trigger_type, context)
    except Exception:
        logger.exception(
            "Automation dispatch failed for trigger %s (member_id=%s)",
            trigger_type,
            context.get("member_id"),
        )
        return []
