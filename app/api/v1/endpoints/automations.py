"""Automation API: definitions CRUD, manual runs, run logs, stats, event ingress and cron.

Static paths (/logs, /stats, /process-due, /events, /workflows/...) are declared
before /{automation_id} so they are not captured by it.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    RuntimeDep,
    get_automation_log_repo,
    get_definition_service,
    get_definition_service_for_write,
    get_dispatcher,
    get_engine_for_write,
    get_scheduler,
    get_stats_service,
    require_cron_secret,
)
from app.application.dtos.automation import AutomationCreate
from app.application.use_cases.automations import (
    AutomationDefinitionService,
    AutomationEngine,
    AutomationScheduler,
    AutomationStatsService,
    EventDispatcher,
    dispatch_safely,
    ensure_event_trigger,
)
from app.core.limiter import limit_cron, limit_manual_run, limit_writes
from app.infrastructure.persistence.repositories import AutomationLogRepository
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

PROCESS_DUE_PATH = "/automations/process-due"

router = APIRouter()


@router.get("", response_model=list[AutomationResponse])
async def list_automations(
    service: Annotated[AutomationDefinitionService, Depends(get_definition_service)],
    trigger_type: str | None = Query(None),
    status: str | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """List automation definitions, optionally filtered by trigger type and status."""
    automations = await service.list(
        trigger_type=trigger_type, status=status, skip=skip, limit=limit
    )
    return [AutomationResponse.model_validate(a) for a in automations]


@router.post("", response_model=AutomationResponse, status_code=201)
@limit_writes
async def create_automation(
    request: Request,
    body: AutomationCreateRequest,
    service: Annotated[AutomationDefinitionService, Depends(get_definition_service_for_write)],
):
    """Create an automation. Malformed definitions are rejected with 400."""
    automation = await service.create(
        AutomationCreate(
            name=body.name,
            trigger_type=body.trigger_type,
            actions=[a.model_dump(exclude_none=True) for a in body.actions],
            description=body.description,
            trigger_conditions=body.trigger_conditions,
            status=body.status,
            schedule_interval_seconds=body.schedule_interval_seconds,
            next_run=body.next_run,
            continue_on_error=body.continue_on_error,
            created_by=body.created_by,
        )
    )
    return AutomationResponse.model_validate(automation)


@router.get("/logs", response_model=list[AutomationLogResponse])
async def list_automation_logs(
    log_repo: Annotated[AutomationLogRepository, Depends(get_automation_log_repo)],
    automation_id: str | None = Query(None),
    success: bool | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
):
    """Run log entries, newest first."""
    logs = await log_repo.list_logs(
        automation_id=automation_id, success=success, skip=skip, limit=limit
    )
    return [AutomationLogResponse.model_validate(log) for log in logs]


@router.get("/stats", response_model=AutomationStatsResponse)
async def get_automation_stats(
    service: Annotated[AutomationStatsService, Depends(get_stats_service)],
    automation_id: str | None = Query(None),
):
    """Totals, success rate, per-automation breakdown and the ten most recent runs."""
    stats = await service.get_stats(automation_id)
    return AutomationStatsResponse.model_validate(stats)


@router.post("/process-due", response_model=ProcessDueResponse)
@limit_cron
async def process_due_automations(
    request: Request,
    scheduler: Annotated[AutomationScheduler, Depends(get_scheduler)],
    _: Annotated[None, Depends(require_cron_secret)] = None,
):
    """Run every due scheduled automation once (called by an external cron)."""
    result = await scheduler.process_due()
    return ProcessDueResponse.model_validate(result)


@router.post("/events", response_model=AutomationEventResponse)
@limit_writes
async def ingest_automation_event(
    request: Request,
    body: AutomationEventRequest,
    dispatcher: Annotated[EventDispatcher, Depends(get_dispatcher)],
    _: Annotated[None, Depends(require_cron_secret)] = None,
):
    """Fire automations for a domain event (donation received, event check-in, ...).

    Send it after the triggering change is committed. Run failures are reported
    per run in the body; they never fail the request.
    """
    ensure_event_trigger(body.trigger_type)
    runs = await dispatch_safely(dispatcher, body.trigger_type, dict(body.context))
    return AutomationEventResponse(
        trigger_type=body.trigger_type,
        runs=[RunOutcomeResponse.model_validate(r) for r in runs],
    )


@router.get("/workflows/{status_token}", response_model=WorkflowStatusResponse)
async def get_external_workflow_status(status_token: str, runtime: RuntimeDep):
    """Status of an external workflow started by a call_external_workflow action."""
    status = await runtime.workflow_invoker.query_status(status_token)
    return WorkflowStatusResponse(status_token=status_token, status=status)


@router.get("/{automation_id}", response_model=AutomationResponse)
async def get_automation(
    automation_id: str,
    service: Annotated[AutomationDefinitionService, Depends(get_definition_service)],
):
    """Get automation by id."""
    return AutomationResponse.model_validate(await service.get(automation_id))


@router.put("/{automation_id}", response_model=AutomationResponse)
@limit_writes
async def update_automation(
    request: Request,
    automation_id: str,
    body: AutomationUpdate,
    service: Annotated[AutomationDefinitionService, Depends(get_definition_service_for_write)],
):
    """Update an automation (partial). The merged definition is validated."""
    patch = body.model_dump(exclude_unset=True)
    if body.actions is not None:
        patch["actions"] = [a.model_dump(exclude_none=True) for a in body.actions]
    automation = await service.update(automation_id, patch)
    return AutomationResponse.model_validate(automation)


@router.delete("/{automation_id}", status_code=204)
@limit_writes
async def delete_automation(
    request: Request,
    automation_id: str,
    service: Annotated[AutomationDefinitionService, Depends(get_definition_service_for_write)],
):
    """Delete an automation; its run logs are kept."""
    await service.delete(automation_id)
    return Response(status_code=204)


@router.post("/{automation_id}/run", response_model=RunOutcomeResponse)
@limit_manual_run
async def run_automation(
    request: Request,
    automation_id: str,
    engine: Annotated[AutomationEngine, Depends(get_engine_for_write)],
    body: RunAutomationRequest | None = None,
):
    """Run one automation now against the given context. Failures are in the body, not the status."""
    outcome = await engine.run_by_id(automation_id, dict(body.context) if body else {})
    return RunOutcomeResponse.model_validate(outcome)
