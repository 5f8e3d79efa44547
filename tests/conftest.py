"""Pytest configuration and fixtures for guildhall.

Uses app.main:app for HTTP tests. Repository and API tests run against an
in-memory SQLite database (aiosqlite) built from the ORM metadata, so they
need no Postgres; the session dependencies are overridden per test.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.infrastructure.persistence.models  # noqa: F401  (registers tables)
from app.api.v1.dependencies import get_automation_runtime
from app.core.config import Settings
from app.domain.entities.automation import AutomationEntity
from app.domain.entities.member import MemberEntity
from app.infrastructure.persistence.database import (
    Base,
    get_db,
    get_db_transactional,
)
from app.infrastructure.services import AutomationRuntime
from app.main import app

FIXED_NOW = datetime(2026, 1, 5, 9, 0, tzinfo=UTC)


def make_automation(**overrides) -> AutomationEntity:
    """AutomationEntity with sensible defaults for unit tests."""
    values = {
        "id": "auto1",
        "name": "Welcome",
        "description": None,
        "trigger_type": "member_created",
        "trigger_conditions": None,
        "actions": [{"type": "send_email", "config": {"template": "welcome"}}],
        "status": "active",
        "schedule_interval_seconds": None,
        "next_run": None,
        "last_run_at": None,
        "run_count": 0,
        "continue_on_error": False,
        "created_by": None,
    }
    values.update(overrides)
    return AutomationEntity(**values)


def make_member(**overrides) -> MemberEntity:
    values = {
        "id": "mem1",
        "email": "ada@example.org",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "tier": "gold",
        "status": "active",
        "created_at": FIXED_NOW,
    }
    values.update(overrides)
    return MemberEntity(**values)


class RecordingSender:
    """ICommunicationSender that records every send."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, dict]] = []

    async def send(self, template: str, recipient: str, data: dict) -> None:
        self.sent.append((template, recipient, data))


@pytest.fixture
async def sqlite_engine():
    """In-memory SQLite engine with the full schema; one shared connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # SQLite savepoints need explicit BEGIN (driver-level transaction handling off).
    @event.listens_for(engine.sync_engine, "connect")
    def _no_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=sqlite_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    """Session for repository tests. Not committed; discarded after the test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def runtime(session_factory, sender) -> AutomationRuntime:
    """Runtime over the SQLite database, recording sender, no delayed executor."""

    @asynccontextmanager
    async def session_scope():
        async with session_factory() as session:
            async with session.begin():
                yield session

    settings = Settings(
        database_url="",
        cron_secret="test-cron-secret",
        onboarding_auto_start=True,
        _env_file=None,
    )
    return AutomationRuntime(
        settings,
        communication_sender=sender,
        session_scope=session_scope,
    )


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI), no dependency overrides."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def api_client(session_factory, runtime) -> AsyncIterator[AsyncClient]:
    """HTTP client whose session and runtime dependencies use the SQLite database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_db_transactional():
        async with session_factory() as session:
            async with session.begin():
                yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_transactional] = override_get_db_transactional
    app.dependency_overrides[get_automation_runtime] = lambda: runtime
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
