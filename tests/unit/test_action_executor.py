"""ActionExecutor unit tests with mocked collaborators."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.services.action_executor import ActionExecutor
from app.domain.exceptions import ResourceNotFoundException
from app.domain.value_objects.actions import parse_action
from app.infrastructure.exceptions import ExternalServiceException


@pytest.fixture
def collaborators():
    sender = AsyncMock()
    task_repo = AsyncMock()
    task_repo.create = AsyncMock(return_value=MagicMock(id="task1"))
    updater = AsyncMock()
    invoker = AsyncMock()
    invoker.invoke = AsyncMock(return_value="exec-42")
    return sender, task_repo, updater, invoker


@pytest.fixture
def executor(collaborators) -> ActionExecutor:
    sender, task_repo, updater, invoker = collaborators
    return ActionExecutor(
        communication_sender=sender,
        task_repo=task_repo,
        record_updater=updater,
        workflow_invoker=invoker,
        timeout_seconds=1.0,
    )


async def test_send_email_uses_context_address(executor, collaborators) -> None:
    sender = collaborators[0]
    action = parse_action(
        {"type": "send_email", "config": {"template": "welcome", "data": {"year": 2026}}}
    )
    result = await executor.execute(
        action, {"member_id": "m1", "email": "ada@example.org"}, automation_id="a1"
    )
    assert result.ok
    assert result.detail == {"template": "welcome", "recipient": "ada@example.org"}
    sender.send.assert_awaited_once_with(
        "welcome", "ada@example.org", {"member_id": "m1", "email": "ada@example.org", "year": 2026}
    )


async def test_send_email_explicit_recipient_wins(executor, collaborators) -> None:
    action = parse_action(
        {"type": "send_email", "config": {"template": "alert", "to": "staff@example.org"}}
    )
    result = await executor.execute(action, {"email": "ada@example.org"})
    assert result.ok
    assert collaborators[0].send.await_args.args[1] == "staff@example.org"


async def test_send_email_without_recipient_fails(executor, collaborators) -> None:
    action = parse_action({"type": "send_email", "config": {"template": "welcome"}})
    result = await executor.execute(action, {"member_id": "m1"})
    assert not result.ok
    assert "no recipient" in result.error
    collaborators[0].send.assert_not_awaited()


async def test_send_email_without_template_fails(executor) -> None:
    action = parse_action({"type": "send_email", "config": {}})
    result = await executor.execute(action, {"email": "a@b.org"})
    assert not result.ok
    assert "template" in result.error


async def test_create_task(executor, collaborators) -> None:
    task_repo = collaborators[1]
    action = parse_action(
        {
            "type": "create_task",
            "config": {"title": "Call donor", "assignee": "dev_team", "due_in": "1 day"},
        }
    )
    result = await executor.execute(action, {"member_id": "m1"}, automation_id="a1")
    assert result.ok
    assert result.detail == {"task_id": "task1"}
    call = task_repo.create.await_args
    assert call.args == ("Call donor",)
    assert call.kwargs["member_id"] == "m1"
    assert call.kwargs["assignee"] == "dev_team"
    assert call.kwargs["source_automation_id"] == "a1"
    assert call.kwargs["due_at"] is not None


async def test_create_task_requires_title(executor) -> None:
    result = await executor.execute(parse_action({"type": "create_task"}), {})
    assert not result.ok
    assert "title" in result.error


async def test_update_member_field(executor, collaborators) -> None:
    updater = collaborators[2]
    action = parse_action(
        {"type": "update_member_field", "config": {"field": "tier", "value": "gold"}}
    )
    result = await executor.execute(action, {"member_id": "m1"})
    assert result.ok
    updater.update.assert_awaited_once_with("member", "m1", {"tier": "gold"})


async def test_update_member_field_needs_member_id(executor, collaborators) -> None:
    action = parse_action(
        {"type": "update_member_field", "config": {"field": "tier", "value": "gold"}}
    )
    result = await executor.execute(action, {})
    assert not result.ok
    assert "member_id" in result.error
    collaborators[2].update.assert_not_awaited()


async def test_update_member_field_missing_member(executor, collaborators) -> None:
    collaborators[2].update.side_effect = ResourceNotFoundException("member", "m404")
    action = parse_action(
        {"type": "update_member_field", "config": {"field": "tier", "value": "gold"}}
    )
    result = await executor.execute(action, {"member_id": "m404"})
    assert not result.ok
    assert result.error == "member not found: m404"


async def test_call_external_workflow(executor, collaborators) -> None:
    invoker = collaborators[3]
    action = parse_action(
        {
            "type": "call_external_workflow",
            "config": {"workflow": "sync-crm", "payload": {"source": "guildhall"}},
        }
    )
    result = await executor.execute(action, {"member_id": "m1"})
    assert result.ok
    assert result.detail == {"workflow": "sync-crm", "status_token": "exec-42"}
    invoker.invoke.assert_awaited_once_with(
        "sync-crm", {"member_id": "m1", "source": "guildhall"}
    )


async def test_external_service_error_is_reported(executor, collaborators) -> None:
    collaborators[3].invoke.side_effect = ExternalServiceException("n8n", "HTTP 500")
    action = parse_action({"type": "call_external_workflow", "config": {"workflow": "w"}})
    result = await executor.execute(action, {})
    assert not result.ok
    assert result.error == "n8n request failed: HTTP 500"


async def test_unknown_action_fails_closed(executor) -> None:
    result = await executor.execute(parse_action({"type": "send_fax"}), {})
    assert not result.ok
    assert "send_fax" in result.error


async def test_unexpected_exception_is_captured(executor, collaborators) -> None:
    collaborators[0].send.side_effect = RuntimeError("smtp down")
    action = parse_action({"type": "send_email", "config": {"template": "t"}})
    result = await executor.execute(action, {"email": "a@b.org"})
    assert not result.ok
    assert result.error == "send_email failed: smtp down"


async def test_timeout(collaborators) -> None:
    sender = collaborators[0]

    async def slow_send(*args, **kwargs) -> None:
        await asyncio.sleep(5)

    sender.send.side_effect = slow_send
    executor = ActionExecutor(communication_sender=sender, timeout_seconds=0.05)
    action = parse_action({"type": "send_email", "config": {"template": "t"}})
    result = await executor.execute(action, {"email": "a@b.org"})
    assert not result.ok
    assert "timed out" in result.error


async def test_missing_collaborator() -> None:
    executor = ActionExecutor()
    result = await executor.execute(
        parse_action({"type": "create_task", "config": {"title": "x"}}), {}
    )
    assert not result.ok
    assert "not configured" in result.error


async def test_wait_is_noop(executor) -> None:
    result = await executor.execute(parse_action({"type": "wait", "delay": 60}), {})
    assert result.ok
    assert result.detail == {"waited_seconds": 60.0}
