"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IAutomationLogRepository,
    IAutomationRepository,
    IMemberRepository,
    IOnboardingProgressRepository,
    ITaskRepository,
)
from app.application.interfaces.services import (
    ICommunicationSender,
    IDelayedExecutor,
    IExternalWorkflowInvoker,
    IRecordUpdater,
)

__all__ = [
    "IAutomationLogRepository",
    "IAutomationRepository",
    "ICommunicationSender",
    "IDelayedExecutor",
    "IExternalWorkflowInvoker",
    "IMemberRepository",
    "IOnboardingProgressRepository",
    "IRecordUpdater",
    "ITaskRepository",
]
