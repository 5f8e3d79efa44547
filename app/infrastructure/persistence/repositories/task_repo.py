"""Task repository for the create_task action and onboarding task list."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.task import TaskResult
from app.infrastructure.persistence.models.task import Task
from app.shared.enums import TaskStatus
from app.shared.utils.datetime import ensure_utc


def _to_result(t: Task) -> TaskResult:
    """Map Task ORM to TaskResult DTO."""
    return TaskResult(
        id=t.id,
        member_id=t.member_id,
        title=t.title,
        description=t.description,
        assignee=t.assignee,
        due_at=ensure_utc(t.due_at),
        status=t.status,
        source_automation_id=t.source_automation_id,
        created_at=ensure_utc(t.created_at),
    )


class TaskRepository:
    """Task repository. Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(
        self,
        title: str,
        *,
        member_id: str | None = None,
        description: str | None = None,
        assignee: str | None = None,
        due_at: datetime | None = None,
        source_automation_id: str | None = None,
    ) -> TaskResult:
        """Create an open task and return the result DTO.

        Runs in a savepoint so a failed insert rolls back only itself.
        """
        task = Task(
            title=title,
            member_id=member_id,
            description=description,
            assignee=assignee,
            due_at=ensure_utc(due_at),
            source_automation_id=source_automation_id,
            status=TaskStatus.OPEN.value,
        )
        async with self.db.begin_nested():
            self.db.add(task)
            await self.db.flush()
            await self.db.refresh(task)
        return _to_result(task)
