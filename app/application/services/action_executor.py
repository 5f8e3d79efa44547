"""Action executor: perform exactly one action against one context.

Every failure, including timeouts and collaborator exceptions, comes back as
ActionResult(ok=False, error=...). Nothing raised by a collaborator escapes
execute().
"""

import asyncio
from collections.abc import Mapping
from typing import Any

from app.application.dtos.automation import ActionResult
from app.application.interfaces.repositories import ITaskRepository
from app.application.interfaces.services import (
    ICommunicationSender,
    IExternalWorkflowInvoker,
    IRecordUpdater,
)
from app.domain.exceptions import (
    ActionExecutionException,
    ConfigurationException,
    GuildhallException,
)
from app.domain.value_objects.actions import (
    Action,
    CallExternalWorkflowAction,
    CreateTaskAction,
    SendEmailAction,
    UnknownAction,
    UpdateMemberFieldAction,
    WaitAction,
)
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

DEFAULT_ACTION_TIMEOUT_SECONDS = 30.0


def _member_id(context: Mapping[str, Any]) -> str | None:
    value = context.get("member_id") or context.get("id")
    return str(value) if value else None


def _recipient(action: SendEmailAction, context: Mapping[str, Any]) -> str | None:
    return action.to or context.get("email") or context.get("member_email")


class ActionExecutor:
    """Runs one action descriptor via the matching collaborator."""

    def __init__(
        self,
        *,
        communication_sender: ICommunicationSender | None = None,
        task_repo: ITaskRepository | None = None,
        record_updater: IRecordUpdater | None = None,
        workflow_invoker: IExternalWorkflowInvoker | None = None,
        timeout_seconds: float = DEFAULT_ACTION_TIMEOUT_SECONDS,
    ) -> None:
        self._communication_sender = communication_sender
        self._task_repo = task_repo
        self._record_updater = record_updater
        self._workflow_invoker = workflow_invoker
        self._timeout_seconds = timeout_seconds

    async def execute(
        self,
        action: Action,
        context: Mapping[str, Any],
        *,
        automation_id: str | None = None,
    ) -> ActionResult:
        """Execute action and report the outcome; never raises."""
        try:
            detail = await asyncio.wait_for(
                self._dispatch(action, context, automation_id),
                timeout=self._timeout_seconds,
            )
            return ActionResult.success(detail)
        except TimeoutError:
            logger.warning(
                "Action %s timed out after %s seconds (automation_id=%s)",
                action.type,
                self._timeout_seconds,
                automation_id,
            )
            return ActionResult.failure(
                f"{action.type} timed out after {self._timeout_seconds:g} seconds"
            )
        except GuildhallException as e:
            logger.warning(
                "Action %s failed (automation_id=%s): %s",
                action.type,
                automation_id,
                e.message,
            )
            return ActionResult.failure(e.message)
        except Exception as e:
            logger.exception(
                "Action %s raised (automation_id=%s)", action.type, automation_id
            )
            return ActionResult.failure(f"{action.type} failed: {e}")

    async def _dispatch(
        self,
        action: Action,
        context: Mapping[str, Any],
        automation_id: str | None,
    ) -> dict[str, Any] | None:
        match action:
            case SendEmailAction():
                return await self._send_email(action, context)
            case CreateTaskAction():
                return await self._create_task(action, context, automation_id)
            case UpdateMemberFieldAction():
                return await self._update_member_field(action, context)
            case CallExternalWorkflowAction():
                return await self._call_external_workflow(action, context)
            case WaitAction():
                # Suspension is handled by the engine; the step itself is a no-op.
                return {"waited_seconds": action.duration.seconds}
            case UnknownAction():
                raise ConfigurationException(
                    f"Cannot execute action '{action.type}': {action.reason}",
                    key=action.type,
                )
        raise ConfigurationException(f"Unsupported action {action!r}")

    async def _send_email(
        self, action: SendEmailAction, context: Mapping[str, Any]
    ) -> dict[str, Any]:
        if self._communication_sender is None:
            raise ActionExecutionException(action.type, "communication sender not configured")
        if not action.template:
            raise ActionExecutionException(action.type, "config.template is required")
        recipient = _recipient(action, context)
        if not recipient:
            raise ActionExecutionException(action.type, "no recipient address in config or context")
        data = {**context, **action.data}
        await self._communication_sender.send(action.template, recipient, data)
        return {"template": action.template, "recipient": recipient}

    async def _create_task(
        self,
        action: CreateTaskAction,
        context: Mapping[str, Any],
        automation_id: str | None,
    ) -> dict[str, Any]:
        if self._task_repo is None:
            raise ActionExecutionException(action.type, "task repository not configured")
        if not action.title:
            raise ActionExecutionException(action.type, "config.title is required")
        due_at = utc_now() + action.due_in.as_timedelta() if action.due_in else None
        task = await self._task_repo.create(
            action.title,
            member_id=_member_id(context),
            description=action.description,
            assignee=action.assignee,
            due_at=due_at,
            source_automation_id=automation_id,
        )
        return {"task_id": task.id}

    async def _update_member_field(
        self, action: UpdateMemberFieldAction, context: Mapping[str, Any]
    ) -> dict[str, Any]:
        if self._record_updater is None:
            raise ActionExecutionException(action.type, "record updater not configured")
        if not action.field:
            raise ActionExecutionException(action.type, "config.field is required")
        member_id = _member_id(context)
        if not member_id:
            raise ActionExecutionException(action.type, "context has no member_id")
        await self._record_updater.update("member", member_id, {action.field: action.value})
        return {"member_id": member_id, "field": action.field}

    async def _call_external_workflow(
        self, action: CallExternalWorkflowAction, context: Mapping[str, Any]
    ) -> dict[str, Any]:
        if self._workflow_invoker is None:
            raise ActionExecutionException(action.type, "external workflow invoker not configured")
        if not action.workflow:
            raise ActionExecutionException(action.type, "config.workflow is required")
        payload = {**context, **action.payload}
        status_token = await self._workflow_invoker.invoke(action.workflow, payload)
        return {"workflow": action.workflow, "status_token": status_token}
