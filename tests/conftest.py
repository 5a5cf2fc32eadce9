"""Pytest configuration and fixtures for the automation engine.

HTTP tests run against create_app() on the memory backend. DB-dependent
fixtures use automation.infrastructure.persistence.database and skip when
Postgres is not configured.
"""

from collections.abc import AsyncIterator, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from automation.application.dtos.trigger import TriggerPayload
from automation.application.services.template_resolver import TemplateResolver
from automation.application.use_cases.workflows.actions import ActionDispatcher
from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.core.config import get_settings
from automation.domain.entities.workflow import ActionSpec, WorkflowDefinitionEntity
from automation.infrastructure import memory
from automation.infrastructure.persistence import database

TENANT_ID = "tenant-1"


def _make_workflow(
    workflow_id: str,
    actions: list[dict[str, Any]],
    trigger_type: str = "field_changed",
    trigger_entity: str = "deal",
    trigger_config: dict[str, Any] | None = None,
    tenant_id: str = TENANT_ID,
    is_active: bool = True,
) -> WorkflowDefinitionEntity:
    """Workflow entity with actions given as stored documents."""
    return WorkflowDefinitionEntity(
        id=workflow_id,
        tenant_id=tenant_id,
        name=f"Workflow {workflow_id}",
        trigger_type=trigger_type,
        trigger_entity=trigger_entity,
        trigger_config=trigger_config or {},
        conditions={},
        actions=[ActionSpec.from_dict(a, i) for i, a in enumerate(actions)],
        is_active=is_active,
    )


def _make_context(
    new_values: dict[str, Any] | None = None,
    old_values: dict[str, Any] | None = None,
    entity_type: str = "deal",
    entity_id: str | None = "deal-1",
) -> ExecutionContext:
    return ExecutionContext.from_trigger(
        TriggerPayload(
            tenant_id=TENANT_ID,
            trigger_type="field_changed",
            entity_type=entity_type,
            entity_id=entity_id,
            old_values=old_values,
            new_values=new_values or {},
        )
    )


@pytest.fixture
def record_store() -> memory.InMemoryRecordStore:
    return memory.InMemoryRecordStore()


@pytest.fixture
def activity_sink() -> memory.InMemoryActivitySink:
    return memory.InMemoryActivitySink()


@pytest.fixture
def execution_log() -> memory.InMemoryExecutionLogRepository:
    return memory.InMemoryExecutionLogRepository()


@pytest.fixture
def workflow_repo() -> memory.InMemoryWorkflowDefinitionRepository:
    return memory.InMemoryWorkflowDefinitionRepository()


@pytest.fixture
def dispatcher(
    record_store: memory.InMemoryRecordStore,
    activity_sink: memory.InMemoryActivitySink,
) -> ActionDispatcher:
    """ActionDispatcher over in-memory stores, without a notification service."""
    return ActionDispatcher(
        record_store=record_store,
        activity_sink=activity_sink,
        template_resolver=TemplateResolver(),
    )


@pytest.fixture
def app(monkeypatch: pytest.MonkeyPatch) -> Iterator[FastAPI]:
    """Fresh app on the memory backend (own in-memory stores)."""
    monkeypatch.setenv("DATABASE_BACKEND", "memory")
    monkeypatch.setenv("TELEMETRY_ENABLED", "false")
    get_settings.cache_clear()
    from automation.main import create_app

    yield create_app()
    get_settings.cache_clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_BACKEND=postgres and DATABASE_URL. Skips when Postgres
    is not configured. Use @pytest.mark.requires_db to mark tests that need
    this fixture; run without DB via: pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_BACKEND=postgres and DATABASE_URL, "
            "then run: alembic upgrade head"
        )
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_workflow():
    """Factory for WorkflowDefinitionEntity (tenant TENANT_ID by default)."""
    return _make_workflow


@pytest.fixture
def make_context():
    """Factory for a fresh ExecutionContext on a deal."""
    return _make_context
