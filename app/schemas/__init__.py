"""Pydantic request/response schemas for the API."""

from app.schemas.automation import (
    AutomationCreateRequest,
    AutomationEventRequest,
    AutomationEventResponse,
    AutomationLogResponse,
    AutomationResponse,
    AutomationStatsResponse,
    AutomationUpdate,
    ProcessDueResponse,
    RunAutomationRequest,
    RunOutcomeResponse,
    WorkflowStatusResponse,
)
from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.member import MemberCreateRequest, MemberResponse
from app.schemas.onboarding import OnboardingProgressResponse, OnboardingStartRequest

__all__ = [
    "AutomationCreateRequest",
    "AutomationEventRequest",
    "AutomationEventResponse",
    "AutomationLogResponse",
    "AutomationResponse",
    "AutomationStatsResponse",
    "AutomationUpdate",
    "HealthResponse",
    "MemberCreateRequest",
    "MemberResponse",
    "OnboardingProgressResponse",
    "OnboardingStartRequest",
    "ProcessDueResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "RunAutomationRequest",
    "RunOutcomeResponse",
    "WorkflowStatusResponse",
]
