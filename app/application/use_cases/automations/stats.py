"""Aggregate run statistics from the automation log."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.application.dtos.automation import AutomationStats

if TYPE_CHECKING:
    from app.application.interfaces.repositories import IAutomationLogRepository

RECENT_LOG_LIMIT = 10


class AutomationStatsService:
    """Computes totals, success rate and per-automation breakdown."""

    def __init__(self, log_repo: IAutomationLogRepository) -> None:
        self._log_repo = log_repo

    async def get_stats(self, automation_id: str | None = None) -> AutomationStats:
        """Return stats for one automation, or across all when automation_id is None.

        Only completed and failed runs are counted; a suspended run is counted
        once, when its continuation finishes. success_rate is a percentage
        rounded to two decimals (0.0 when there are no runs).
        """
        aggregate = await self._log_repo.aggregate(automation_id)
        success_rate = (
            round(aggregate.successful / aggregate.total * 100, 2) if aggregate.total else 0.0
        )
        by_automation = (
            await self._log_repo.counts_by_automation() if automation_id is None else []
        )
        recent = await self._log_repo.list_logs(
            automation_id=automation_id, limit=RECENT_LOG_LIMIT
        )
        return AutomationStats(
            total_runs=aggregate.total,
            successful_runs=aggregate.successful,
            failed_runs=aggregate.failed,
            success_rate=success_rate,
            last_run_at=aggregate.last_run_at,
            by_automation=by_automation,
            recent_logs=recent,
        )
