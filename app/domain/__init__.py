"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    AutomationEntity,
    MemberEntity,
    OnboardingProgressEntity,
    OnboardingStep,
)
from app.domain.enums import ActionType, AutomationStatus, MemberTier, TriggerType
from app.domain.exceptions import (
    ActionExecutionException,
    AuthenticationException,
    ConfigurationException,
    GuildhallException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    ValidationException,
)
from app.domain.value_objects import Duration

__all__ = [
    # Entities
    "AutomationEntity",
    "MemberEntity",
    "OnboardingProgressEntity",
    "OnboardingStep",
    # Enums
    "ActionType",
    "AutomationStatus",
    "MemberTier",
    "TriggerType",
    # Exceptions
    "ActionExecutionException",
    "AuthenticationException",
    "ConfigurationException",
    "GuildhallException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "ValidationException",
    # Value objects
    "Duration",
]
