"""In-memory implementations of the store ports.

Used by the 'memory' backend and by tests. Each instance is one isolated
store; documents are copied on the way in and out.
"""

from __future__ import annotations

import copy
from typing import Any

from automation.application.dtos.execution import WorkflowExecution, WorkflowRunResult
from automation.domain.entities.graph import GraphDefinition
from automation.domain.entities.workflow import WorkflowDefinitionEntity
from automation.domain.exceptions import ResourceNotFoundException
from automation.shared.utils.generators import generate_cuid


class InMemoryRecordStore:
    """IRecordStore keyed by (tenant_id, entity_type, record_id)."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str, str], dict[str, Any]] = {}

    async def get(
        self, tenant_id: str, entity_type: str, record_id: str
    ) -> dict[str, Any]:
        key = (tenant_id, entity_type, record_id)
        if key not in self._records:
            raise ResourceNotFoundException(entity_type, record_id)
        return {"id": record_id, **copy.deepcopy(self._records[key])}

    async def create(
        self, tenant_id: str, entity_type: str, fields: dict[str, Any]
    ) -> str:
        record_id = generate_cuid()
        self._records[(tenant_id, entity_type, record_id)] = copy.deepcopy(fields)
        return record_id

    async def update(
        self,
        tenant_id: str,
        entity_type: str,
        record_id: str,
        partial_fields: dict[str, Any],
    ) -> None:
        key = (tenant_id, entity_type, record_id)
        if key not in self._records:
            raise ResourceNotFoundException(entity_type, record_id)
        self._records[key].update(copy.deepcopy(partial_fields))

    def put(
        self, tenant_id: str, entity_type: str, record_id: str, fields: dict[str, Any]
    ) -> None:
        """Seed a record with a known id."""
        self._records[(tenant_id, entity_type, record_id)] = copy.deepcopy(fields)

    def list_records(self, tenant_id: str, entity_type: str) -> list[dict[str, Any]]:
        return [
            {"id": rid, **copy.deepcopy(fields)}
            for (tid, etype, rid), fields in self._records.items()
            if tid == tenant_id and etype == entity_type
        ]


class InMemoryWorkflowDefinitionRepository:
    """IWorkflowDefinitionRepository backed by a list (insertion order)."""

    def __init__(self, workflows: list[WorkflowDefinitionEntity] | None = None) -> None:
        self._workflows: list[WorkflowDefinitionEntity] = list(workflows or [])

    def add(self, workflow: WorkflowDefinitionEntity) -> None:
        self._workflows.append(workflow)

    async def get_active_by_trigger(
        self, tenant_id: str, trigger_type: str, entity_type: str
    ) -> list[WorkflowDefinitionEntity]:
        return [
            wf
            for wf in self._workflows
            if wf.belongs_to_tenant(tenant_id)
            and wf.can_trigger_on(trigger_type, entity_type)
        ]


class InMemoryGraphRepository:
    """IGraphRepository keyed by (tenant_id, graph_id)."""

    def __init__(self) -> None:
        self._graphs: dict[tuple[str, str], GraphDefinition] = {}

    def add(self, graph: GraphDefinition) -> None:
        self._graphs[(graph.tenant_id, graph.id)] = graph

    async def get_by_id(self, graph_id: str, tenant_id: str) -> GraphDefinition | None:
        return self._graphs.get((tenant_id, graph_id))


class InMemoryActivitySink:
    """IActivitySink that keeps entries in a list."""

    def __init__(self) -> None:
        self.entries: list[dict[str, Any]] = []

    async def append(
        self,
        tenant_id: str,
        activity_type: str,
        title: str,
        linked_entity_type: str | None = None,
        linked_entity_id: str | None = None,
        content: str | None = None,
    ) -> None:
        self.entries.append(
            {
                "tenant_id": tenant_id,
                "activity_type": activity_type,
                "title": title,
                "content": content,
                "entity_type": linked_entity_type,
                "entity_id": linked_entity_id,
            }
        )


class InMemoryExecutionLogRepository:
    """IExecutionLogRepository that keeps run records in lists."""

    def __init__(self) -> None:
        self.workflow_runs: list[WorkflowRunResult] = []
        self.graph_runs: list[WorkflowExecution] = []

    async def record_workflow_run(self, result: WorkflowRunResult) -> None:
        self.workflow_runs.append(result)

    async def record_graph_run(self, execution: WorkflowExecution) -> None:
        self.graph_runs.append(execution)
