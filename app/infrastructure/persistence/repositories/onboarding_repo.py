"""Onboarding progress repository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.onboarding import OnboardingProgressEntity, OnboardingStep
from app.infrastructure.persistence.models.onboarding import OnboardingProgress
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.enums import OnboardingStatus
from app.shared.utils.datetime import ensure_utc


class OnboardingProgressRepository(
    BaseRepository[OnboardingProgress, OnboardingProgressEntity]
):
    """Onboarding progress repository. Implements IOnboardingProgressRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, OnboardingProgress)

    def _to_entity(self, obj: OnboardingProgress) -> OnboardingProgressEntity:
        return OnboardingProgressEntity(
            id=obj.id,
            member_id=obj.member_id,
            status=obj.status,
            started_at=ensure_utc(obj.started_at),
            steps=[OnboardingStep.from_dict(s) for s in obj.steps or []],
            config=dict(obj.config or {}),
            completed_at=ensure_utc(obj.completed_at),
        )

    async def get_by_id(
        self, progress_id: str, *, for_update: bool = False
    ) -> OnboardingProgressEntity | None:
        obj = await self._get_model(progress_id, for_update=for_update)
        return self._to_entity(obj) if obj is not None else None

    async def get_active_for_member(self, member_id: str) -> OnboardingProgressEntity | None:
        result = await self.db.execute(
            select(OnboardingProgress)
            .where(
                OnboardingProgress.member_id == member_id,
                OnboardingProgress.status == OnboardingStatus.IN_PROGRESS.value,
            )
            .execution_options(populate_existing=True)
        )
        obj = result.scalar_one_or_none()
        return self._to_entity(obj) if obj is not None else None

    async def get_latest_for_member(self, member_id: str) -> OnboardingProgressEntity | None:
        result = await self.db.execute(
            select(OnboardingProgress)
            .where(OnboardingProgress.member_id == member_id)
            .order_by(OnboardingProgress.started_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        obj = result.scalar_one_or_none()
        return self._to_entity(obj) if obj is not None else None

    async def create(self, progress: OnboardingProgressEntity) -> OnboardingProgressEntity:
        obj = OnboardingProgress(
            id=progress.id,
            member_id=progress.member_id,
            status=progress.status,
            steps=[s.to_dict() for s in progress.steps],
            config=progress.config,
            started_at=progress.started_at,
            completed_at=progress.completed_at,
        )
        return self._to_entity(await self._add(obj))

    async def save(self, progress: OnboardingProgressEntity) -> OnboardingProgressEntity:
        obj = await self._get_model(progress.id)
        if obj is None:
            raise LookupError(f"onboarding progress {progress.id} does not exist")
        return self._to_entity(
            await self._apply(
                obj,
                {
                    "status": progress.status,
                    "steps": [s.to_dict() for s in progress.steps],
                    "completed_at": progress.completed_at,
                },
            )
        )
