"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.automation_runtime import AutomationRuntime
from app.infrastructure.services.delayed_executor import (
    APSchedulerDelayedExecutor,
    CommitBoundDelayedExecutor,
    create_scheduler,
)
from app.infrastructure.services.record_updater import SqlRecordUpdater

__all__ = [
    "APSchedulerDelayedExecutor",
    "AutomationRuntime",
    "CommitBoundDelayedExecutor",
    "SqlRecordUpdater",
    "create_scheduler",
]
