"""Member API: creation (fires member_created automations) and onboarding."""

from dataclasses import replace
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies import (
    RuntimeDep,
    get_onboarding_workflow,
    get_onboarding_workflow_for_write,
)
from app.application.dtos.onboarding import FollowUpConfig
from app.application.use_cases.automations import dispatch_safely
from app.application.use_cases.onboarding import OnboardingWorkflow
from app.core.limiter import limit_writes
from app.domain.entities.member import MemberEntity
from app.domain.enums import TriggerType
from app.infrastructure.persistence.database import get_db
from app.infrastructure.persistence.repositories import MemberRepository
from app.infrastructure.services import AutomationRuntime
from app.schemas.member import MemberCreateRequest, MemberResponse
from app.schemas.onboarding import OnboardingProgressResponse, OnboardingStartRequest
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


async def _start_onboarding_safely(
    runtime: AutomationRuntime, db: AsyncSession, member: MemberEntity
) -> None:
    try:
        async with db.begin():
            await runtime.onboarding(db).execute_onboarding(member, runtime.onboarding_config())
    except Exception:
        logger.exception("Automatic onboarding failed for member %s", member.id)


@router.post("", response_model=MemberResponse, status_code=201)
@limit_writes
async def create_member(
    request: Request,
    body: MemberCreateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    runtime: RuntimeDep,
):
    """Create a member, commit, then fire member_created automations.

    Automation and onboarding failures are logged and never fail the request.
    """
    async with db.begin():
        member = await MemberRepository(db).create(
            body.first_name,
            body.last_name,
            email=str(body.email) if body.email else None,
            tier=body.tier.value,
            status=body.status.value,
        )
    await dispatch_safely(
        runtime.dispatcher(db), TriggerType.MEMBER_CREATED.value, member.to_context()
    )
    if runtime.settings.onboarding_auto_start:
        await _start_onboarding_safely(runtime, db, member)
    return MemberResponse.model_validate(member)


@router.post("/{member_id}/onboarding", response_model=OnboardingProgressResponse, status_code=201)
@limit_writes
async def start_member_onboarding(
    request: Request,
    member_id: str,
    workflow: Annotated[OnboardingWorkflow, Depends(get_onboarding_workflow_for_write)],
    runtime: RuntimeDep,
    body: OnboardingStartRequest | None = None,
):
    """Start onboarding; returns the in-progress record when one already exists."""
    config = runtime.onboarding_config()
    if body is not None:
        overrides = body.model_dump(exclude_unset=True, exclude_none=True)
        if "follow_ups" in overrides:
            overrides["follow_ups"] = tuple(FollowUpConfig(**f) for f in overrides["follow_ups"])
        config = replace(config, **overrides)
    progress = await workflow.start_for_member(member_id, config)
    return OnboardingProgressResponse.model_validate(progress)


@router.get("/{member_id}/onboarding", response_model=OnboardingProgressResponse)
async def get_member_onboarding(
    member_id: str,
    workflow: Annotated[OnboardingWorkflow, Depends(get_onboarding_workflow)],
):
    """Latest onboarding record for the member (404 when never onboarded)."""
    progress = await workflow.get_onboarding_progress(member_id)
    return OnboardingProgressResponse.model_validate(progress)
