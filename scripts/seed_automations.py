"""Seed starter automations (welcome series, donation thanks, tier upgrade, reminders).

Usage:
    uv run python -m scripts.seed_automations [--paused]

Creates each starter automation unless one with the same name exists.
With --paused they are created paused so staff can review them first.
Requires: DATABASE_URL (loaded from .env) and a migrated database.
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from app.application.dtos.automation import AutomationCreate
from app.application.use_cases.automations import AutomationDefinitionService
from app.core.config import get_settings
from app.domain.enums import AutomationStatus, TriggerType
from app.domain.exceptions import SqlNotConfiguredException
from app.infrastructure.persistence.database import session_scope
from app.infrastructure.persistence.repositories import AutomationRepository

STARTER_AUTOMATIONS: list[AutomationCreate] = [
    AutomationCreate(
        name="Member Welcome Sequence",
        description="Welcome emails over the first week and a coordinator follow-up",
        trigger_type=TriggerType.MEMBER_CREATED.value,
        actions=[
            {"type": "send_email", "config": {"template": "welcome_immediate"}},
            {"type": "send_email", "config": {"template": "welcome_day_3"}, "delay": "3 days"},
            {"type": "send_email", "config": {"template": "welcome_week_1"}, "delay": "4 days"},
            {
                "type": "create_task",
                "config": {
                    "title": "Follow up with new member",
                    "assignee": "membership_coordinator",
                    "due_in": "3 days",
                },
                "delay": "7 days",
            },
        ],
    ),
    AutomationCreate(
        name="Donation Thank You",
        description="Receipt right away, impact story two days later",
        trigger_type=TriggerType.DONATION_RECEIVED.value,
        actions=[
            {"type": "send_email", "config": {"template": "donation_receipt"}},
            {"type": "wait", "config": {"duration": "2 days"}},
            {"type": "send_email", "config": {"template": "donation_impact"}},
        ],
    ),
    AutomationCreate(
        name="Major Donor Alert",
        description="Notify development staff of donations of 1000 or more",
        trigger_type=TriggerType.DONATION_RECEIVED.value,
        trigger_conditions={"amount": {"op": "gte", "value": 1000}},
        actions=[
            {
                "type": "create_task",
                "config": {
                    "title": "Call major donor",
                    "assignee": "development_director",
                    "due_in": "2 days",
                },
            },
        ],
    ),
    AutomationCreate(
        name="Tier Upgrade Celebration",
        description="Congratulate members moving to a higher tier",
        trigger_type=TriggerType.TIER_UPGRADE.value,
        actions=[
            {"type": "send_email", "config": {"template": "tier_upgrade_congratulations"}},
            {"type": "call_external_workflow", "config": {"workflow": "tier-upgrade"}},
        ],
    ),
    AutomationCreate(
        name="Event Reminder",
        description="Reminder with logistics for registered attendees",
        trigger_type=TriggerType.EVENT_REMINDER.value,
        actions=[{"type": "send_email", "config": {"template": "event_reminder"}}],
    ),
    AutomationCreate(
        name="Post-Event Survey",
        description="Feedback survey the day after an event",
        trigger_type=TriggerType.POST_EVENT_SURVEY.value,
        actions=[
            {"type": "send_email", "config": {"template": "post_event_survey"}, "delay": "1 day"}
        ],
    ),
    AutomationCreate(
        name="Weekly Newsletter",
        description="Hand the weekly newsletter to the external workflow runner",
        trigger_type=TriggerType.SCHEDULED.value,
        schedule_interval_seconds=7 * 24 * 3600,
        actions=[{"type": "call_external_workflow", "config": {"workflow": "weekly-newsletter"}}],
    ),
]


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


async def main() -> None:
    """Create missing starter automations in one transaction."""
    load_dotenv(_project_root() / ".env", override=True)
    get_settings.cache_clear()
    paused = "--paused" in sys.argv[1:]
    created: list[str] = []
    try:
        async with session_scope() as session:
            repo = AutomationRepository(session)
            service = AutomationDefinitionService(repo)
            existing: set[str] = {a.name for a in await repo.list_automations(limit=10_000)}
            for template in STARTER_AUTOMATIONS:
                if template.name in existing:
                    continue
                data = (
                    replace(template, status=AutomationStatus.PAUSED.value) if paused else template
                )
                automation = await service.create(data)
                created.append(f"{automation.name} ({automation.id})")
    except SqlNotConfiguredException as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)
    for line in created:
        print(f"Created: {line}")
    print(f"Done. {len(created)} created, {len(STARTER_AUTOMATIONS) - len(created)} already present")


if __name__ == "__main__":
    asyncio.run(main())
