"""Activity sink and execution audit repositories."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from automation.application.dtos.execution import (
    NodeExecutionStep,
    WorkflowExecution,
    WorkflowRunResult,
)
from automation.infrastructure.persistence.models.execution import (
    Activity,
    GraphExecutionLog,
    WorkflowExecutionLog,
)
from automation.infrastructure.persistence.repositories.base import BaseRepository


def _step_document(step: NodeExecutionStep) -> dict[str, Any]:
    doc = asdict(step)
    doc["status"] = step.status.value
    for key in ("started_at", "completed_at"):
        if doc[key] is not None:
            doc[key] = doc[key].isoformat()
    return doc


class SqlActivitySink(BaseRepository[Activity]):
    """IActivitySink over the activity table."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Activity)

    async def append(
        self,
        tenant_id: str,
        activity_type: str,
        title: str,
        linked_entity_type: str | None = None,
        linked_entity_id: str | None = None,
        content: str | None = None,
    ) -> None:
        async with self._savepoint("append"):
            self.db.add(
                Activity(
                    tenant_id=tenant_id,
                    activity_type=activity_type,
                    title=title,
                    content=content,
                    entity_type=linked_entity_type,
                    entity_id=linked_entity_id,
                )
            )


class ExecutionLogRepository(BaseRepository[WorkflowExecutionLog]):
    """IExecutionLogRepository over workflow_execution and graph_execution."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowExecutionLog)

    async def record_workflow_run(self, result: WorkflowRunResult) -> None:
        async with self._savepoint("record_workflow_run"):
            self.db.add(
                WorkflowExecutionLog(
                    tenant_id=result.tenant_id,
                    workflow_id=result.workflow_id,
                    entity_type=result.entity_type,
                    entity_id=result.entity_id,
                    status=result.status.value,
                    started_at=result.started_at,
                    completed_at=result.completed_at,
                    actions_executed=result.actions_executed,
                    actions_failed=result.actions_failed,
                    execution_log=[o.to_log_entry() for o in result.action_log],
                    error_message=result.error,
                )
            )

    async def record_graph_run(self, execution: WorkflowExecution) -> None:
        async with self._savepoint("record_graph_run"):
            self.db.add(
                GraphExecutionLog(
                    id=execution.id,
                    tenant_id=execution.tenant_id,
                    graph_id=execution.graph_id,
                    status=execution.status.value,
                    started_at=execution.started_at,
                    completed_at=execution.completed_at,
                    steps=[_step_document(s) for s in execution.steps],
                    error_message=execution.error,
                )
            )
