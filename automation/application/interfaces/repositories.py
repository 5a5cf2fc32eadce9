"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain entities only; no
infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from automation.application.dtos.execution import (
        WorkflowExecution,
        WorkflowRunResult,
    )
    from automation.domain.entities.graph import GraphDefinition
    from automation.domain.entities.workflow import WorkflowDefinitionEntity


# Record store interface
class IRecordStore(Protocol):
    """Protocol for the durable record store (tenant scoped).

    get/update raise ResourceNotFoundException for a missing record and
    PersistenceException for transient failures.
    """

    async def get(
        self, tenant_id: str, entity_type: str, record_id: str
    ) -> dict[str, Any]:
        """Return the record's field document."""

    async def create(
        self, tenant_id: str, entity_type: str, fields: dict[str, Any]
    ) -> str:
        """Create a record and return its new id."""

    async def update(
        self,
        tenant_id: str,
        entity_type: str,
        record_id: str,
        partial_fields: dict[str, Any],
    ) -> None:
        """Merge partial_fields into the record."""


# Workflow definition repository interface
class IWorkflowDefinitionRepository(Protocol):
    """Protocol for the legacy workflow authoring store (read-only here)."""

    async def get_active_by_trigger(
        self, tenant_id: str, trigger_type: str, entity_type: str
    ) -> list[WorkflowDefinitionEntity]:
        """Return active workflows for tenant matching trigger type and entity."""


# Node graph repository interface
class IGraphRepository(Protocol):
    """Protocol for the node graph authoring store (read-only here)."""

    async def get_by_id(
        self, graph_id: str, tenant_id: str
    ) -> GraphDefinition | None:
        """Return graph by ID within tenant, or None."""


# Execution log repository interface
class IExecutionLogRepository(Protocol):
    """Protocol for persisting run audit records."""

    async def record_workflow_run(self, result: WorkflowRunResult) -> None:
        """Persist one legacy workflow run (status, error, per-action log)."""

    async def record_graph_run(self, execution: WorkflowExecution) -> None:
        """Persist one graph run (status, steps, timing)."""
