"""DTOs for automation-created staff tasks (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TaskResult:
    """Task created by a create_task action or the onboarding task list."""

    id: str
    member_id: str | None
    title: str
    description: str | None
    assignee: str | None
    due_at: datetime | None
    status: str
    source_automation_id: str | None
    created_at: datetime
