"""Automation log repository (append-only run log and aggregates)."""

from __future__ import annotations

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.automation import (
    AutomationLogCreate,
    AutomationLogResult,
    AutomationRunCounts,
    LogAggregate,
)
from app.infrastructure.persistence.models.automation import Automation, AutomationLog
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.enums import RunStatus
from app.shared.utils.datetime import ensure_utc, utc_now

_TERMINAL = (RunStatus.COMPLETED.value, RunStatus.FAILED.value)


class AutomationLogRepository(BaseRepository[AutomationLog, AutomationLogResult]):
    """Automation log repository. Implements IAutomationLogRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, AutomationLog)

    def _to_entity(self, obj: AutomationLog) -> AutomationLogResult:
        return AutomationLogResult(
            id=obj.id,
            automation_id=obj.automation_id,
            member_id=obj.member_id,
            status=obj.status,
            success=obj.success,
            error_message=obj.error_message,
            actions_executed=obj.actions_executed,
            actions_failed=obj.actions_failed,
            action_results=list(obj.action_results or []),
            trigger_data=dict(obj.trigger_data or {}),
            parent_log_id=obj.parent_log_id,
            created_at=ensure_utc(obj.created_at),
        )

    async def append(self, entry: AutomationLogCreate) -> str:
        obj = AutomationLog(
            automation_id=entry.automation_id,
            member_id=entry.member_id,
            status=entry.status,
            success=entry.success,
            error_message=entry.error_message,
            actions_executed=entry.actions_executed,
            actions_failed=entry.actions_failed,
            action_results=entry.action_results,
            trigger_data=entry.trigger_data,
            parent_log_id=entry.parent_log_id,
            created_at=utc_now(),
        )
        self.db.add(obj)
        await self.db.flush()
        return obj.id

    async def list_logs(
        self,
        *,
        automation_id: str | None = None,
        success: bool | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[AutomationLogResult]:
        q = select(AutomationLog)
        if automation_id is not None:
            q = q.where(AutomationLog.automation_id == automation_id)
        if success is not None:
            q = q.where(AutomationLog.success.is_(success))
        q = q.order_by(AutomationLog.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(q)
        return [self._to_entity(log) for log in result.scalars().all()]

    async def aggregate(self, automation_id: str | None = None) -> LogAggregate:
        q = select(
            func.count(AutomationLog.id),
            func.coalesce(func.sum(case((AutomationLog.success.is_(True), 1), else_=0)), 0),
            func.max(AutomationLog.created_at),
        ).where(AutomationLog.status.in_(_TERMINAL))
        if automation_id is not None:
            q = q.where(AutomationLog.automation_id == automation_id)
        total, successful, last_run_at = (await self.db.execute(q)).one()
        total = int(total or 0)
        successful = int(successful or 0)
        return LogAggregate(
            total=total,
            successful=successful,
            failed=total - successful,
            last_run_at=ensure_utc(last_run_at),
        )

    async def counts_by_automation(self) -> list[AutomationRunCounts]:
        successful = func.coalesce(
            func.sum(case((AutomationLog.success.is_(True), 1), else_=0)), 0
        )
        q = (
            select(Automation.id, Automation.name, func.count(AutomationLog.id), successful)
            .join(AutomationLog, AutomationLog.automation_id == Automation.id)
            .where(AutomationLog.status.in_(_TERMINAL))
            .group_by(Automation.id, Automation.name)
            .order_by(func.count(AutomationLog.id).desc())
        )
        rows = (await self.db.execute(q)).all()
        return [
            AutomationRunCounts(
                automation_id=automation_id,
                automation_name=name,
                total=int(total),
                successful=int(ok),
                failed=int(total) - int(ok),
            )
            for automation_id, name, total, ok in rows
        ]
