"""AutomationStatsService unit tests."""

from unittest.mock import AsyncMock

from app.application.dtos.automation import AutomationRunCounts, LogAggregate
from app.application.use_cases.automations import AutomationStatsService
from tests.conftest import FIXED_NOW


def _log_repo(aggregate: LogAggregate) -> AsyncMock:
    repo = AsyncMock()
    repo.aggregate = AsyncMock(return_value=aggregate)
    repo.counts_by_automation = AsyncMock(
        return_value=[AutomationRunCounts("a1", "Welcome", 3, 2, 1)]
    )
    repo.list_logs = AsyncMock(return_value=[])
    return repo


async def test_overall_stats() -> None:
    repo = _log_repo(LogAggregate(total=3, successful=2, failed=1, last_run_at=FIXED_NOW))
    stats = await AutomationStatsService(repo).get_stats()

    assert stats.total_runs == 3
    assert stats.successful_runs == 2
    assert stats.failed_runs == 1
    assert stats.success_rate == 66.67
    assert stats.last_run_at == FIXED_NOW
    assert stats.by_automation[0].automation_name == "Welcome"
    repo.list_logs.assert_awaited_once_with(automation_id=None, limit=10)


async def test_single_automation_has_no_breakdown() -> None:
    repo = _log_repo(LogAggregate(total=4, successful=4, failed=0, last_run_at=FIXED_NOW))
    stats = await AutomationStatsService(repo).get_stats("a1")

    assert stats.success_rate == 100.0
    assert stats.by_automation == []
    repo.aggregate.assert_awaited_once_with("a1")
    repo.counts_by_automation.assert_not_awaited()


async def test_no_runs() -> None:
    repo = _log_repo(LogAggregate(total=0, successful=0, failed=0, last_run_at=None))
    stats = await AutomationStatsService(repo).get_stats()
    assert stats.success_rate == 0.0
    assert stats.last_run_at is None
