"""Automation use cases: engine, scheduler, dispatcher, definitions, stats."""

from app.application.use_cases.automations.definitions import AutomationDefinitionService
from app.application.use_cases.automations.dispatcher import (
    EventDispatcher,
    dispatch_safely,
    ensure_event_trigger,
)
from app.application.use_cases.automations.engine import AutomationEngine
from app.application.use_cases.automations.scheduler import AutomationScheduler
from app.application.use_cases.automations.stats import AutomationStatsService

__all__ = [
    "AutomationDefinitionService",
    "AutomationEngine",
    "AutomationScheduler",
    "AutomationStatsService",
    "EventDispatcher",
    "dispatch_safely",
    "ensure_event_trigger",
]
