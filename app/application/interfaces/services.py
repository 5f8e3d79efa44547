"""Service interfaces (ports) for the application layer.

Protocols define contracts for the collaborators the automation core calls
out to (DIP). Implementations live in app.infrastructure.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, Protocol


# Communication sender interface (send_email action, onboarding emails)
class ICommunicationSender(Protocol):
    """Protocol for sending a templated communication to one recipient."""

    async def send(self, template: str, recipient: str, data: dict[str, Any]) -> None:
        """Send the communication. Raises on delivery failure."""


# Record updater interface (update_member_field action)
class IRecordUpdater(Protocol):
    """Protocol for patching a domain record by type and id."""

    async def update(self, entity_type: str, entity_id: str, patch: dict[str, Any]) -> None:
        """Apply patch. Raises when the record is missing or a field is not writable."""


# External workflow invoker interface (call_external_workflow action)
class IExternalWorkflowInvoker(Protocol):
    """Protocol for triggering and inspecting workflows in an external system."""

    async def invoke(self, workflow_ref: str, payload: dict[str, Any]) -> str:
        """Trigger the workflow; return a status token for later lookup."""

    async def query_status(self, status_token: str) -> str:
        """Return the external system's status for a previous invocation."""


# Delayed execution interface (wait action, delayed steps, onboarding follow-ups)
class IDelayedExecutor(Protocol):
    """Protocol for running a coroutine once after a delay, without blocking the caller."""

    def schedule_after(
        self,
        delay: timedelta,
        continuation: Callable[[], Awaitable[Any]],
        *,
        name: str | None = None,
        job_id: str | None = None,
    ) -> str:
        """Schedule continuation to run once after delay; return the job id (job_id if given)."""
