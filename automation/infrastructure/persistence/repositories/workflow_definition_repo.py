"""Workflow definition and node graph repositories (authoring store reads)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from automation.domain.entities.graph import GraphDefinition
from automation.domain.entities.workflow import ActionSpec, WorkflowDefinitionEntity
from automation.infrastructure.persistence.models.workflow_definition import (
    NodeGraph,
    WorkflowDefinition,
)
from automation.infrastructure.persistence.repositories.base import BaseRepository


def _to_workflow_entity(row: WorkflowDefinition) -> WorkflowDefinitionEntity:
    return WorkflowDefinitionEntity(
        id=row.id,
        tenant_id=row.tenant_id,
        name=row.name,
        trigger_type=row.trigger_type,
        trigger_entity=row.trigger_entity,
        trigger_config=dict(row.trigger_config or {}),
        conditions=dict(row.conditions or {}),
        actions=[ActionSpec.from_dict(a, i) for i, a in enumerate(row.actions or [])],
        is_active=row.is_active,
    )


class WorkflowDefinitionRepository(BaseRepository[WorkflowDefinition]):
    """IWorkflowDefinitionRepository over workflow_definition."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowDefinition)

    async def get_active_by_trigger(
        self, tenant_id: str, trigger_type: str, entity_type: str
    ) -> list[WorkflowDefinitionEntity]:
        async with self._translate_errors("get_active_by_trigger"):
            result = await self.db.execute(
                select(WorkflowDefinition)
                .where(
                    WorkflowDefinition.tenant_id == tenant_id,
                    WorkflowDefinition.trigger_type == trigger_type,
                    WorkflowDefinition.trigger_entity == entity_type,
                    WorkflowDefinition.is_active.is_(True),
                )
                .order_by(WorkflowDefinition.created_at.asc())
            )
            rows = list(result.scalars().all())
        return [_to_workflow_entity(r) for r in rows]


class NodeGraphRepository(BaseRepository[NodeGraph]):
    """IGraphRepository over node_graph."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, NodeGraph)

    async def get_by_id(self, graph_id: str, tenant_id: str) -> GraphDefinition | None:
        async with self._translate_errors("get_by_id"):
            result = await self.db.execute(
                select(NodeGraph).where(
                    NodeGraph.id == graph_id,
                    NodeGraph.tenant_id == tenant_id,
                )
            )
            row = result.scalar_one_or_none()
        if row is None:
            return None
        return GraphDefinition.from_documents(
            row.id, row.tenant_id, row.name, row.nodes or [], row.edges or [], row.is_active
        )
