"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.enums import (
    OnboardingStatus,
    OnboardingStepKind,
    OnboardingStepStatus,
    RunStatus,
    TaskStatus,
)
from app.shared.utils import ensure_utc, generate_cuid, isoformat_utc, utc_now

__all__ = [
    "OnboardingStatus",
    "OnboardingStepKind",
    "OnboardingStepStatus",
    "RunStatus",
    "TaskStatus",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "isoformat_utc",
]
