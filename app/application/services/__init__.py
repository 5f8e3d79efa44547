"""Application services: trigger evaluation and action execution."""

from app.application.services.action_executor import ActionExecutor
from app.application.services.trigger_evaluator import TriggerEvaluator

__all__ = [
    "ActionExecutor",
    "TriggerEvaluator",
]
