"""Member onboarding workflow.

Welcome communication and the staff follow-up task run immediately; the
remaining follow-up communications are handed to the delayed executor at
fixed offsets from onboarding start, so a late or failed step never shifts
the ones after it. Step failures are recorded on the step and do not stop
other steps. A member without an email address cannot be onboarded.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from functools import partial
from typing import TYPE_CHECKING, Any

from app.application.dtos.onboarding import TASK_LIST_STEP, WELCOME_STEP, OnboardingConfig
from app.domain.entities.onboarding import OnboardingProgressEntity, OnboardingStep
from app.domain.exceptions import ResourceNotFoundException
from app.shared.enums import OnboardingStatus, OnboardingStepKind
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        IMemberRepository,
        IOnboardingProgressRepository,
        ITaskRepository,
    )
    from app.application.interfaces.services import ICommunicationSender, IDelayedExecutor
    from app.domain.entities.member import MemberEntity

logger = get_logger(__name__)

StepRunner = Callable[[str, str], Awaitable[Any]]

DEFAULT_STEP_TIMEOUT_SECONDS = 30.0

TIER_BENEFITS: dict[str, list[str]] = {
    "bronze": [
        "Monthly newsletter with impact updates",
        "Annual impact report",
        "Member-only content access",
        "Community forum participation",
    ],
    "silver": [
        "All Bronze benefits",
        "Quarterly member meetups",
        "Priority event registration",
        "Direct communication with program managers",
        "Volunteer opportunity matching",
    ],
    "gold": [
        "All Silver benefits",
        "Monthly impact calls with leadership",
        "Behind-the-scenes facility tours",
        "Early access to new programs",
        "Personalized impact reports",
    ],
    "platinum": [
        "All Gold benefits",
        "Quarterly strategy sessions with board members",
        "VIP event access and recognition",
        "Custom volunteer project opportunities",
        "Annual appreciation dinner invitation",
    ],
}

EXCLUSIVE_PERKS: dict[str, list[str]] = {
    "bronze": [],
    "silver": ["Welcome gift package", "10% discount on event merchandise"],
    "gold": [
        "Premium welcome gift",
        "15% discount on event merchandise",
        "Complimentary guest passes to select events",
    ],
    "platinum": [
        "Exclusive platinum welcome package",
        "20% discount on all merchandise",
        "Unlimited guest passes",
        "Personal thank you call from leadership",
    ],
}


def plan_steps(config: OnboardingConfig, started_at: datetime) -> list[OnboardingStep]:
    """Return the ordered steps for config, each scheduled relative to started_at."""
    steps: list[OnboardingStep] = []
    if config.send_welcome_email:
        steps.append(
            OnboardingStep(
                name=WELCOME_STEP,
                kind=OnboardingStepKind.EMAIL.value,
                template=config.welcome_template,
                scheduled_for=started_at,
            )
        )
    if config.create_followup_task:
        steps.append(
            OnboardingStep(
                name=TASK_LIST_STEP,
                kind=OnboardingStepKind.TASK_LIST.value,
                scheduled_for=started_at,
            )
        )
    for follow_up in config.follow_ups:
        steps.append(
            OnboardingStep(
                name=follow_up.name,
                kind=OnboardingStepKind.EMAIL.value,
                template=follow_up.template,
                offset_minutes=follow_up.offset_minutes,
                scheduled_for=started_at + timedelta(minutes=follow_up.offset_minutes),
            )
        )
    return steps


class OnboardingWorkflow:
    """Drives a member's onboarding progress record."""

    def __init__(
        self,
        progress_repo: IOnboardingProgressRepository,
        member_repo: IMemberRepository,
        communication_sender: ICommunicationSender,
        task_repo: ITaskRepository,
        *,
        delayed_executor: IDelayedExecutor | None = None,
        step_runner: StepRunner | None = None,
        step_timeout_seconds: float = DEFAULT_STEP_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._progress_repo = progress_repo
        self._member_repo = member_repo
        self._communication_sender = communication_sender
        self._task_repo = task_repo
        self._delayed_executor = delayed_executor
        self._step_runner = step_runner or self.run_step
        self._step_timeout_seconds = step_timeout_seconds
        self._clock = clock

    async def execute_onboarding(
        self, member: MemberEntity, config: OnboardingConfig | None = None
    ) -> OnboardingProgressEntity:
        """Start onboarding for member, or return the record already in progress."""
        existing = await self._progress_repo.get_active_for_member(member.id)
        if existing is not None:
            logger.info("Onboarding already in progress for member %s", member.id)
            return existing

        config = config or OnboardingConfig()
        started_at = self._clock()
        progress = OnboardingProgressEntity(
            id=generate_cuid(),
            member_id=member.id,
            status=OnboardingStatus.IN_PROGRESS.value,
            started_at=started_at,
            steps=plan_steps(config, started_at),
            config=config.to_dict(),
        )

        if not member.email:
            logger.warning("Cannot onboard member %s: no email address", member.id)
            for step in progress.steps:
                step.mark_failed(started_at, "member has no email address")
            progress.fail(started_at)
            return await self._progress_repo.create(progress)

        progress = await self._progress_repo.create(progress)
        for step in progress.steps:
            if step.scheduled_for is None or step.scheduled_for <= started_at:
                await self._run_step(progress, step, member, config)
            else:
                self._schedule_step(progress, step)

        progress.complete_if_finished(self._clock())
        logger.info(
            "Started onboarding %s for member %s (%s step(s))",
            progress.id,
            member.id,
            len(progress.steps),
        )
        return await self._progress_repo.save(progress)

    async def start_for_member(
        self, member_id: str, config: OnboardingConfig | None = None
    ) -> OnboardingProgressEntity:
        """Load the member and start onboarding (see execute_onboarding)."""
        member = await self._member_repo.get_by_id(member_id)
        if member is None:
            raise ResourceNotFoundException("member", member_id)
        return await self.execute_onboarding(member, config)

    async def run_step(self, progress_id: str, step_name: str) -> OnboardingProgressEntity | None:
        """Run one deferred step; a no-op for steps that already finished."""
        progress = await self._progress_repo.get_by_id(progress_id, for_update=True)
        if progress is None:
            logger.warning("Onboarding %s not found for step %s", progress_id, step_name)
            return None
        step = progress.step(step_name)
        if step is None or step.is_terminal() or not progress.is_in_progress():
            return progress

        member = await self._member_repo.get_by_id(progress.member_id)
        if member is None:
            step.mark_failed(self._clock(), "member not found")
        else:
            config = OnboardingConfig.from_dict(progress.config)
            await self._run_step(progress, step, member, config)
        progress.complete_if_finished(self._clock())
        return await self._progress_repo.save(progress)

    async def get_onboarding_progress(self, member_id: str) -> OnboardingProgressEntity:
        """Return the latest onboarding record for member_id."""
        progress = await self._progress_repo.get_latest_for_member(member_id)
        if progress is None:
            raise ResourceNotFoundException("onboarding", member_id)
        return progress

    def _schedule_step(self, progress: OnboardingProgressEntity, step: OnboardingStep) -> None:
        if self._delayed_executor is None:
            step.mark_failed(self._clock(), "delayed execution is not configured")
            return
        delay = max(step.scheduled_for - self._clock(), timedelta(0))
        self._delayed_executor.schedule_after(
            delay,
            partial(self._step_runner, progress.id, step.name),
            name=f"onboarding:{progress.id}:{step.name}",
        )

    async def _run_step(
        self,
        progress: OnboardingProgressEntity,
        step: OnboardingStep,
        member: MemberEntity,
        config: OnboardingConfig,
    ) -> None:
        try:
            await asyncio.wait_for(
                self._perform(progress, step, member, config),
                timeout=self._step_timeout_seconds,
            )
        except TimeoutError:
            step.mark_failed(
                self._clock(), f"timed out after {self._step_timeout_seconds:g} seconds"
            )
        except Exception as e:
            logger.warning(
                "Onboarding step %s failed for member %s: %s", step.name, member.id, e
            )
            step.mark_failed(self._clock(), str(e))
        else:
            step.mark_completed(self._clock())

    async def _perform(
        self,
        progress: OnboardingProgressEntity,
        step: OnboardingStep,
        member: MemberEntity,
        config: OnboardingConfig,
    ) -> None:
        if step.kind == OnboardingStepKind.TASK_LIST.value:
            await self._task_repo.create(
                f"Follow up with new member {member.full_name}",
                member_id=member.id,
                description=(
                    f"Check in with {member.full_name} ({member.tier} tier) about their "
                    "first days as a member and answer any questions."
                ),
                assignee=config.followup_task_assignee,
                due_at=progress.started_at + timedelta(hours=config.followup_task_due_hours),
            )
            return
        if not member.email:
            raise ValueError("member has no email address")
        data = {
            **member.to_context(),
            "tier_benefits": TIER_BENEFITS.get(member.tier, TIER_BENEFITS["bronze"]),
            "exclusive_perks": EXCLUSIVE_PERKS.get(member.tier, []),
        }
        await self._communication_sender.send(step.template or step.name, member.email, data)
