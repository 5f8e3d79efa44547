"""Automation repository (definitions, due-query, claim and run statistics)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.automation import AutomationCreate
from app.domain.entities.automation import AutomationEntity
from app.domain.enums import AutomationStatus, TriggerType
from app.infrastructure.persistence.models.automation import Automation
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc


class AutomationRepository(BaseRepository[Automation, AutomationEntity]):
    """Automation repository. Implements IAutomationRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Automation)

    def _to_entity(self, obj: Automation) -> AutomationEntity:
        return AutomationEntity(
            id=obj.id,
            name=obj.name,
            description=obj.description,
            trigger_type=obj.trigger_type,
            trigger_conditions=obj.trigger_conditions,
            actions=list(obj.actions or []),
            status=obj.status,
            schedule_interval_seconds=obj.schedule_interval_seconds,
            next_run=ensure_utc(obj.next_run),
            last_run_at=ensure_utc(obj.last_run_at),
            run_count=obj.run_count,
            continue_on_error=obj.continue_on_error,
            created_by=obj.created_by,
            created_at=ensure_utc(obj.created_at),
            updated_at=ensure_utc(obj.updated_at),
        )

    async def _select(self, stmt: Any) -> list[AutomationEntity]:
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return [self._to_entity(a) for a in result.scalars().all()]

    async def list_automations(
        self,
        *,
        trigger_type: str | None = None,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AutomationEntity]:
        q = select(Automation)
        if trigger_type is not None:
            q = q.where(Automation.trigger_type == trigger_type)
        if status is not None:
            q = q.where(Automation.status == status)
        q = q.order_by(Automation.created_at.desc()).offset(skip).limit(limit)
        return await self._select(q)

    async def list_for_trigger(self, trigger_type: str) -> list[AutomationEntity]:
        return await self._select(
            select(Automation)
            .where(
                Automation.trigger_type == trigger_type,
                Automation.status == AutomationStatus.ACTIVE.value,
            )
            .order_by(Automation.created_at.asc())
        )

    async def list_due(self, now: datetime) -> list[AutomationEntity]:
        return await self._select(
            select(Automation)
            .where(
                Automation.status == AutomationStatus.ACTIVE.value,
                Automation.trigger_type == TriggerType.SCHEDULED.value,
                Automation.next_run.is_not(None),
                Automation.next_run <= ensure_utc(now),
            )
            .order_by(Automation.next_run.asc())
        )

    async def create(self, data: AutomationCreate) -> AutomationEntity:
        obj = Automation(
            name=data.name,
            description=data.description,
            trigger_type=data.trigger_type,
            trigger_conditions=data.trigger_conditions,
            actions=data.actions,
            status=data.status,
            schedule_interval_seconds=data.schedule_interval_seconds,
            next_run=ensure_utc(data.next_run),
            continue_on_error=data.continue_on_error,
            created_by=data.created_by,
            run_count=0,
        )
        return self._to_entity(await self._add(obj))

    async def update(self, automation_id: str, patch: dict[str, Any]) -> AutomationEntity | None:
        obj = await self._get_model(automation_id)
        if obj is None:
            return None
        return self._to_entity(await self._apply(obj, patch))

    async def delete(self, automation_id: str) -> bool:
        obj = await self._get_model(automation_id)
        if obj is None:
            return False
        await self._remove(obj)
        return True

    async def claim_next_run(
        self,
        automation_id: str,
        expected_next_run: datetime | None,
        new_next_run: datetime,
    ) -> bool:
        """Conditional UPDATE; exactly one concurrent caller sees rowcount 1."""
        condition = (
            Automation.next_run.is_(None)
            if expected_next_run is None
            else Automation.next_run == ensure_utc(expected_next_run)
        )
        result = await self.db.execute(
            update(Automation)
            .where(Automation.id == automation_id, condition)
            .values(next_run=ensure_utc(new_next_run), updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def record_run(self, automation_id: str, ran_at: datetime) -> None:
        await self.db.execute(
            update(Automation)
            .where(Automation.id == automation_id)
            .values(
                run_count=Automation.run_count + 1,
                last_run_at=ensure_utc(ran_at),
            )
            .execution_options(synchronize_session=False)
        )
