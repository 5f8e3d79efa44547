"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.automation import AutomationEntity
from app.domain.entities.member import MemberEntity
from app.domain.entities.onboarding import OnboardingProgressEntity, OnboardingStep

__all__ = [
    "AutomationEntity",
    "MemberEntity",
    "OnboardingProgressEntity",
    "OnboardingStep",
]
