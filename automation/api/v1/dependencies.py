"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the tenant, the stores and the engine use
cases. Routes depend only on these, not on infrastructure directly.

When database_backend is 'memory', stores are process-wide singletons on
app.state. When it is 'postgres', each request gets SQLAlchemy
repositories sharing one transactional session. Switch backends via
DATABASE_BACKEND in config.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request

from automation.application.interfaces.repositories import (
    IExecutionLogRepository,
    IGraphRepository,
    IRecordStore,
    IWorkflowDefinitionRepository,
)
from automation.application.interfaces.services import IActivitySink
from automation.application.services.template_resolver import TemplateResolver
from automation.application.use_cases.graphs import GraphExecutor, GraphRunService
from automation.application.use_cases.graphs.handlers.registry import (
    build_default_registry,
)
from automation.application.use_cases.workflows.actions import ActionDispatcher
from automation.application.use_cases.workflows.run_triggered_workflows import (
    TriggeredWorkflowRunner,
)
from automation.application.use_cases.workflows.trigger_matcher import TriggerMatcher
from automation.core.config import Settings, get_settings
from automation.core.tenant_validation import is_valid_tenant_id_format
from automation.infrastructure.memory import (
    InMemoryActivitySink,
    InMemoryExecutionLogRepository,
    InMemoryGraphRepository,
    InMemoryRecordStore,
    InMemoryWorkflowDefinitionRepository,
)
from automation.infrastructure.persistence.database import transactional_session
from automation.infrastructure.persistence.repositories import (
    ExecutionLogRepository,
    NodeGraphRepository,
    SqlActivitySink,
    SqlRecordStore,
    WorkflowDefinitionRepository,
)
from automation.infrastructure.services import LogOnlyNotificationService


@dataclass
class EngineStores:
    """The store ports one request runs against."""

    record_store: IRecordStore
    workflow_repo: IWorkflowDefinitionRepository
    graph_repo: IGraphRepository
    activity_sink: IActivitySink
    execution_log: IExecutionLogRepository


def get_memory_stores(app: FastAPI) -> EngineStores:
    """In-memory stores for this app, created on first use."""
    stores = getattr(app.state, "memory_stores", None)
    if stores is None:
        stores = EngineStores(
            record_store=InMemoryRecordStore(),
            workflow_repo=InMemoryWorkflowDefinitionRepository(),
            graph_repo=InMemoryGraphRepository(),
            activity_sink=InMemoryActivitySink(),
            execution_log=InMemoryExecutionLogRepository(),
        )
        app.state.memory_stores = stores
    return stores


async def get_stores(request: Request) -> AsyncIterator[EngineStores]:
    """Stores for the configured backend; postgres runs in one transaction."""
    if get_settings().database_backend == "memory":
        yield get_memory_stores(request.app)
        return
    async with transactional_session() as db:
        yield EngineStores(
            record_store=SqlRecordStore(db),
            workflow_repo=WorkflowDefinitionRepository(db),
            graph_repo=NodeGraphRepository(db),
            activity_sink=SqlActivitySink(db),
            execution_log=ExecutionLogRepository(db),
        )


async def get_tenant_id(request: Request) -> str:
    """Resolve tenant ID from the tenant header."""
    name = get_settings().tenant_header_name
    value = request.headers.get(name)
    if not value:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required header: {name}",
        )
    if not is_valid_tenant_id_format(value):
        raise HTTPException(
            status_code=400,
            detail="Invalid tenant ID format (use alphanumeric, hyphen, underscore; max 64 characters)",
        )
    return value


def build_action_dispatcher(stores: EngineStores, settings: Settings) -> ActionDispatcher:
    return ActionDispatcher(
        record_store=stores.record_store,
        activity_sink=stores.activity_sink,
        notification_service=LogOnlyNotificationService(),
        template_resolver=TemplateResolver(settings.record_object_name_set),
        creatable_entities=settings.creatable_entity_set,
    )


async def get_triggered_workflow_runner(
    stores: Annotated[EngineStores, Depends(get_stores)],
) -> TriggeredWorkflowRunner:
    """Legacy trigger-action runner bound to this request's stores."""
    return TriggeredWorkflowRunner(
        matcher=TriggerMatcher(stores.workflow_repo),
        dispatcher=build_action_dispatcher(stores, get_settings()),
        execution_log=stores.execution_log,
    )


async def get_graph_run_service(
    stores: Annotated[EngineStores, Depends(get_stores)],
) -> GraphRunService:
    """Graph run use case with the default node handlers."""
    settings = get_settings()
    registry = build_default_registry(
        build_action_dispatcher(stores, settings),
        matching_threshold=settings.matching_threshold,
        matching_limit=settings.matching_limit,
        matching_default_radius_km=settings.matching_default_radius_km,
        geofence_default_radius_km=settings.geofence_default_radius_km,
    )
    return GraphRunService(
        GraphExecutor(registry),
        graph_repo=stores.graph_repo,
        execution_log=stores.execution_log,
    )
