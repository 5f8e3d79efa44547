"""Automation engine: run one automation's action list against a context.

Each invocation writes exactly one AutomationLog entry. A fresh run also
increments run_count once and, for scheduled automations, advances next_run
by one interval from its stored value before any action executes. That
conditional advance is the claim: a concurrent invocation that loses it is
logged as skipped and runs nothing.

Wait steps and delayed actions suspend the run: the remaining actions are
handed to the delayed executor as a RunContinuation and resumed later with
resume(), which re-reads the definition from the store.
"""

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from functools import partial
from typing import Any

from app.application.dtos.automation import (
    ActionOutcome,
    AutomationLogCreate,
    RunContinuation,
    RunOutcome,
)
from app.application.interfaces.repositories import (
    IAutomationLogRepository,
    IAutomationRepository,
)
from app.application.interfaces.services import IDelayedExecutor
from app.application.services.action_executor import ActionExecutor
from app.domain.entities.automation import AutomationEntity
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.domain.value_objects.actions import WaitAction
from app.shared.enums import RunStatus
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

ResumeRunner = Callable[[RunContinuation], Awaitable[Any]]


def _json_safe(context: dict[str, Any]) -> dict[str, Any]:
    """Return context as plain JSON values (datetimes and the like become strings)."""
    return json.loads(json.dumps(context, default=str))


@dataclass
class _RunState:
    """Mutable bookkeeping for one pass over the action list."""

    results: list[ActionOutcome] = field(default_factory=list)
    executed: int = 0
    failed: int = 0
    error: str | None = None
    failed_action_type: str | None = None
    suspend_delay: timedelta | None = None
    suspend_index: int | None = None
    skip_delay_on_resume: bool = False

    def record(self, outcome: ActionOutcome) -> None:
        self.results.append(outcome)
        self.executed += 1
        if not outcome.ok:
            self.failed += 1
            if self.error is None:
                self.error = outcome.error
                self.failed_action_type = outcome.type

    def suspend(self, index: int, delay: timedelta, *, skip_delay: bool) -> None:
        self.suspend_index = index
        self.suspend_delay = delay
        self.skip_delay_on_resume = skip_delay


class AutomationEngine:
    """Executes automations and records their runs."""

    def __init__(
        self,
        automation_repo: IAutomationRepository,
        log_repo: IAutomationLogRepository,
        executor: ActionExecutor,
        *,
        delayed_executor: IDelayedExecutor | None = None,
        resume_runner: ResumeRunner | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._automations = automation_repo
        self._logs = log_repo
        self._executor = executor
        self._delayed_executor = delayed_executor
        self._resume_runner = resume_runner or self.resume
        self._clock = clock

    async def run_by_id(self, automation_id: str, context: dict[str, Any]) -> RunOutcome:
        """Manually run one automation; it must exist and be active."""
        automation = await self._automations.get_by_id(automation_id)
        if automation is None:
            raise ResourceNotFoundException("automation", automation_id)
        if not automation.is_active():
            raise ValidationException(
                f"Automation is not active (status={automation.status})", field="status"
            )
        return await self.run(automation, context)

    async def run(self, automation: AutomationEntity, context: dict[str, Any]) -> RunOutcome:
        """Run the full action list (fail-fast unless continue_on_error) and log it."""
        now = self._clock()
        if automation.is_scheduled():
            new_next_run = automation.following_run(now)
            if new_next_run is not None:
                claimed = await self._automations.claim_next_run(
                    automation.id, automation.next_run, new_next_run
                )
                if not claimed:
                    logger.info(
                        "Automation %s already claimed for next_run=%s; skipping",
                        automation.id,
                        automation.next_run,
                    )
                    return await self._write_skipped(automation, context)

        outcome = await self._execute(automation, context, start=0)
        await self._automations.record_run(automation.id, now)
        return outcome

    async def resume(self, continuation: RunContinuation) -> RunOutcome:
        """Continue a suspended run from its stored position.

        The definition is read again so edits, pauses and deletions made
        while the run was suspended take effect. run_count and next_run are
        not touched; the original invocation already accounted for them.
        """
        automation = await self._automations.get_by_id(continuation.automation_id)
        if automation is None or not automation.is_active():
            reason = (
                "automation was deleted while the run was suspended"
                if automation is None
                else f"automation is no longer active (status={automation.status})"
            )
            logger.warning(
                "Dropping continuation of automation %s: %s",
                continuation.automation_id,
                reason,
            )
            entry = AutomationLogCreate(
                automation_id=automation.id if automation else None,
                status=RunStatus.FAILED.value,
                success=False,
                actions_executed=0,
                error_message=reason,
                member_id=continuation.context.get("member_id"),
                trigger_data=_json_safe(continuation.context),
                parent_log_id=continuation.parent_log_id,
            )
            log_id = await self._logs.append(entry)
            return RunOutcome(
                automation_id=continuation.automation_id,
                status=RunStatus.FAILED.value,
                success=False,
                actions_executed=0,
                actions_failed=0,
                error=reason,
                log_id=log_id,
            )
        return await self._execute(
            automation,
            continuation.context,
            start=continuation.resume_index,
            skip_delay=continuation.skip_delay,
            parent_log_id=continuation.parent_log_id,
        )

    async def _execute(
        self,
        automation: AutomationEntity,
        context: dict[str, Any],
        *,
        start: int,
        skip_delay: bool = False,
        parent_log_id: str | None = None,
    ) -> RunOutcome:
        actions = automation.parsed_actions()
        state = _RunState()
        try:
            for index in range(start, len(actions)):
                action = actions[index]
                if isinstance(action, WaitAction):
                    state.record(ActionOutcome(index, action.type, True))
                    if not action.duration.is_zero and index + 1 < len(actions):
                        state.suspend(index + 1, action.duration.as_timedelta(), skip_delay=False)
                        break
                    continue
                delayed = action.delay is not None and not action.delay.is_zero
                if delayed and not (skip_delay and index == start):
                    state.suspend(index, action.delay.as_timedelta(), skip_delay=True)
                    break
                result = await self._executor.execute(action, context, automation_id=automation.id)
                state.record(
                    ActionOutcome(index, action.type, result.ok, result.error, result.detail)
                )
                if not result.ok and not automation.continue_on_error:
                    break
        except Exception as e:
            logger.exception(
                "Automation %s run aborted (member_id=%s)",
                automation.id,
                context.get("member_id"),
            )
            state.failed += 1
            state.error = state.error or str(e)
            state.suspend_index = None

        if state.suspend_index is not None and self._delayed_executor is None:
            state.failed += 1
            state.error = state.error or "delayed execution is not configured"
            state.suspend_index = None

        if state.suspend_index is not None:
            status = RunStatus.SUSPENDED.value
        elif state.failed:
            status = RunStatus.FAILED.value
        else:
            status = RunStatus.COMPLETED.value
        success = state.failed == 0

        entry = AutomationLogCreate(
            automation_id=automation.id,
            status=status,
            success=success,
            actions_executed=state.executed,
            actions_failed=state.failed,
            error_message=state.error,
            member_id=context.get("member_id"),
            action_results=[r.to_dict() for r in state.results],
            trigger_data=_json_safe(context),
            parent_log_id=parent_log_id,
        )
        log_id = await self._logs.append(entry)

        resumes_at: datetime | None = None
        if state.suspend_index is not None and state.suspend_delay is not None:
            continuation = RunContinuation(
                automation_id=automation.id,
                resume_index=state.suspend_index,
                context=context,
                parent_log_id=log_id,
                skip_delay=state.skip_delay_on_resume,
            )
            self._delayed_executor.schedule_after(
                state.suspend_delay,
                partial(self._resume_runner, continuation),
                name=f"automation:{automation.id}:{log_id}",
            )
            resumes_at = self._clock() + state.suspend_delay
            logger.info(
                "Automation %s suspended at action %s; resumes at %s",
                automation.id,
                state.suspend_index,
                resumes_at.isoformat(),
            )
        elif not success:
            logger.warning(
                "Automation %s failed after %s action(s): %s",
                automation.id,
                state.executed,
                state.error,
            )

        return RunOutcome(
            automation_id=automation.id,
            status=status,
            success=success,
            actions_executed=state.executed,
            actions_failed=state.failed,
            error=state.error,
            failed_action_type=state.failed_action_type,
            action_results=tuple(state.results),
            log_id=log_id,
            resumes_at=resumes_at,
        )

    async def _write_skipped(
        self, automation: AutomationEntity, context: dict[str, Any]
    ) -> RunOutcome:
        reason = "another run already claimed this schedule slot"
        entry = AutomationLogCreate(
            automation_id=automation.id,
            status=RunStatus.SKIPPED.value,
            success=False,
            actions_executed=0,
            error_message=reason,
            member_id=context.get("member_id"),
            trigger_data=_json_safe(context),
        )
        log_id = await self._logs.append(entry)
        return RunOutcome(
            automation_id=automation.id,
            status=RunStatus.SKIPPED.value,
            success=False,
            actions_executed=0,
            actions_failed=0,
            error=reason,
            log_id=log_id,
        )
