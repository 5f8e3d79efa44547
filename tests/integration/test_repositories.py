"""Repository integration tests on SQLite (aiosqlite); the session is discarded after each test."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from app.application.dtos.automation import AutomationCreate, AutomationLogCreate
from app.domain.entities.onboarding import OnboardingProgressEntity, OnboardingStep
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.infrastructure.persistence.repositories import (
    AutomationLogRepository,
    AutomationRepository,
    MemberRepository,
    OnboardingProgressRepository,
    TaskRepository,
)
from app.infrastructure.services import SqlRecordUpdater
from tests.conftest import FIXED_NOW

SEND = [{"type": "send_email", "config": {"template": "welcome"}}]


async def _scheduled(repo: AutomationRepository, name: str, next_run, status: str = "active"):
    return await repo.create(
        AutomationCreate(
            name=name,
            trigger_type="scheduled",
            actions=SEND,
            status=status,
            schedule_interval_seconds=3600,
            next_run=next_run,
        )
    )


class TestAutomationRepository:
    async def test_create_and_get(self, db_session) -> None:
        repo = AutomationRepository(db_session)
        created = await repo.create(
            AutomationCreate(
                name="Major Donor Alert",
                trigger_type="donation_received",
                actions=SEND,
                trigger_conditions={"amount": {"op": "gte", "value": 1000}},
            )
        )
        assert created.id
        assert created.run_count == 0
        assert created.continue_on_error is False

        found = await repo.get_by_id(created.id)
        assert found is not None
        assert found.trigger_conditions == {"amount": {"op": "gte", "value": 1000}}
        assert found.actions == SEND

    async def test_list_due_orders_by_next_run(self, db_session) -> None:
        repo = AutomationRepository(db_session)
        later = await _scheduled(repo, "later", FIXED_NOW - timedelta(minutes=1))
        earlier = await _scheduled(repo, "earlier", FIXED_NOW - timedelta(hours=1))
        await _scheduled(repo, "future", FIXED_NOW + timedelta(hours=1))
        await _scheduled(repo, "paused", FIXED_NOW - timedelta(hours=2), status="paused")

        due = await repo.list_due(FIXED_NOW)
        assert [a.id for a in due] == [earlier.id, later.id]

    async def test_list_for_trigger_only_active(self, db_session) -> None:
        repo = AutomationRepository(db_session)
        active = await repo.create(
            AutomationCreate(name="a", trigger_type="member_created", actions=SEND)
        )
        await repo.create(
            AutomationCreate(name="b", trigger_type="member_created", actions=SEND, status="paused")
        )
        await repo.create(AutomationCreate(name="c", trigger_type="tier_upgrade", actions=SEND))

        assert [a.id for a in await repo.list_for_trigger("member_created")] == [active.id]

    async def test_claim_next_run_is_exclusive(self, db_session) -> None:
        repo = AutomationRepository(db_session)
        automation = await _scheduled(repo, "weekly", FIXED_NOW)
        following = FIXED_NOW + timedelta(hours=1)

        assert await repo.claim_next_run(automation.id, FIXED_NOW, following)
        assert not await repo.claim_next_run(automation.id, FIXED_NOW, following)
        assert (await repo.get_by_id(automation.id)).next_run == following

    async def test_record_run(self, db_session) -> None:
        repo = AutomationRepository(db_session)
        automation = await _scheduled(repo, "weekly", FIXED_NOW)
        await repo.record_run(automation.id, FIXED_NOW)
        await repo.record_run(automation.id, FIXED_NOW + timedelta(hours=1))

        found = await repo.get_by_id(automation.id)
        assert found.run_count == 2
        assert found.last_run_at == FIXED_NOW + timedelta(hours=1)

    async def test_update_and_delete(self, db_session) -> None:
        repo = AutomationRepository(db_session)
        automation = await repo.create(
            AutomationCreate(name="a", trigger_type="member_created", actions=SEND)
        )
        updated = await repo.update(automation.id, {"status": "paused"})
        assert updated.status == "paused"
        assert await repo.delete(automation.id)
        assert await repo.get_by_id(automation.id) is None
        assert not await repo.delete(automation.id)
        assert await repo.update(automation.id, {"status": "active"}) is None


class TestAutomationLogRepository:
    async def test_append_list_and_aggregate(self, db_session) -> None:
        automations = AutomationRepository(db_session)
        logs = AutomationLogRepository(db_session)
        automation = await automations.create(
            AutomationCreate(name="Welcome", trigger_type="member_created", actions=SEND)
        )
        for status, success in [
            ("completed", True),
            ("completed", True),
            ("failed", False),
            ("suspended", True),
            ("skipped", False),
        ]:
            await logs.append(
                AutomationLogCreate(
                    automation_id=automation.id,
                    status=status,
                    success=success,
                    actions_executed=1,
                    member_id="m1",
                    trigger_data={"member_id": "m1"},
                )
            )

        aggregate = await logs.aggregate()
        assert (aggregate.total, aggregate.successful, aggregate.failed) == (3, 2, 1)
        assert aggregate.last_run_at is not None

        (row,) = await logs.counts_by_automation()
        assert (row.automation_name, row.total, row.successful, row.failed) == ("Welcome", 3, 2, 1)

        assert len(await logs.list_logs(automation_id=automation.id)) == 5
        assert len(await logs.list_logs(success=False)) == 2
        assert len(await logs.list_logs(limit=2)) == 2

    async def test_aggregate_empty(self, db_session) -> None:
        aggregate = await AutomationLogRepository(db_session).aggregate("nothing")
        assert (aggregate.total, aggregate.successful, aggregate.last_run_at) == (0, 0, None)


class TestOnboardingProgressRepository:
    @staticmethod
    def _progress(progress_id: str, member_id: str, status: str = "in_progress"):
        return OnboardingProgressEntity(
            id=progress_id,
            member_id=member_id,
            status=status,
            started_at=FIXED_NOW,
            steps=[
                OnboardingStep(
                    name="welcome_email",
                    kind="email",
                    template="member_welcome",
                    scheduled_for=FIXED_NOW,
                )
            ],
            config={"send_welcome_email": True},
        )

    async def test_round_trip_and_save(self, db_session) -> None:
        member = await MemberRepository(db_session).create("Ada", "Lovelace", email="a@b.org")
        repo = OnboardingProgressRepository(db_session)
        created = await repo.create(self._progress("p1", member.id))

        assert created.steps[0].scheduled_for == FIXED_NOW
        assert (await repo.get_active_for_member(member.id)).id == "p1"

        created.steps[0].mark_completed(FIXED_NOW)
        created.complete_if_finished(FIXED_NOW)
        saved = await repo.save(created)
        assert saved.status == "completed"
        assert saved.steps[0].status == "completed"
        assert await repo.get_active_for_member(member.id) is None
        assert (await repo.get_latest_for_member(member.id)).id == "p1"

    async def test_one_active_record_per_member(self, db_session) -> None:
        member = await MemberRepository(db_session).create("Ada", "Lovelace", email="a@b.org")
        repo = OnboardingProgressRepository(db_session)
        await repo.create(self._progress("p1", member.id))
        with pytest.raises(IntegrityError):
            await repo.create(self._progress("p2", member.id))

    async def test_finished_records_do_not_block_a_new_one(self, db_session) -> None:
        member = await MemberRepository(db_session).create("Ada", "Lovelace", email="a@b.org")
        repo = OnboardingProgressRepository(db_session)
        await repo.create(self._progress("p1", member.id, status="failed"))
        await repo.create(self._progress("p2", member.id))
        assert (await repo.get_active_for_member(member.id)).id == "p2"


class TestTaskRepository:
    async def test_create(self, db_session) -> None:
        member = await MemberRepository(db_session).create("Ada", "Lovelace")
        task = await TaskRepository(db_session).create(
            "Call donor",
            member_id=member.id,
            assignee="dev_team",
            due_at=FIXED_NOW + timedelta(days=1),
        )
        assert task.id
        assert task.status == "open"
        assert task.due_at == FIXED_NOW + timedelta(days=1)


class TestSqlRecordUpdater:
    async def test_updates_member_field(self, db_session) -> None:
        members = MemberRepository(db_session)
        member = await members.create("Ada", "Lovelace", tier="silver")
        await SqlRecordUpdater(db_session).update("member", member.id, {"tier": "gold"})
        assert (await members.get_by_id(member.id)).tier == "gold"

    async def test_rejects_unwritable_field(self, db_session) -> None:
        member = await MemberRepository(db_session).create("Ada", "Lovelace")
        with pytest.raises(ValidationException, match="not writable"):
            await SqlRecordUpdater(db_session).update("member", member.id, {"id": "x"})

    async def test_rejects_invalid_value(self, db_session) -> None:
        member = await MemberRepository(db_session).create("Ada", "Lovelace")
        with pytest.raises(ValidationException, match="Invalid value"):
            await SqlRecordUpdater(db_session).update("member", member.id, {"tier": "diamond"})

    async def test_rejects_other_entity_types(self, db_session) -> None:
        with pytest.raises(ValidationException, match="Unsupported entity type"):
            await SqlRecordUpdater(db_session).update("donation", "d1", {"amount": 1})

    async def test_missing_member(self, db_session) -> None:
        with pytest.raises(ResourceNotFoundException):
            await SqlRecordUpdater(db_session).update("member", "missing", {"tier": "gold"})
