"""Automation API schemas: trigger events, graph definitions and run records."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from automation.application.dtos.trigger import TriggerPayload
from automation.domain.entities.graph import Edge, GraphDefinition, NodeInstance
from automation.shared.enums import ExecutionStatus, StepStatus


class TriggerRequest(BaseModel):
    """A change event for one record (legacy trigger path)."""

    trigger_type: str = Field(..., min_length=1, max_length=64)
    entity_type: str = Field(
        ...,
        min_length=1,
        max_length=128,
        validation_alias=AliasChoices("entity_type", "entity"),
    )
    entity_id: str | None = Field(default=None, max_length=128)
    old_values: dict[str, Any] | None = Field(
        default=None, validation_alias=AliasChoices("old_values", "old")
    )
    new_values: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("new_values", "new")
    )

    def to_payload(self, tenant_id: str) -> TriggerPayload:
        return TriggerPayload(
            tenant_id=tenant_id,
            trigger_type=self.trigger_type,
            entity_type=self.entity_type,
            entity_id=self.entity_id,
            old_values=self.old_values,
            new_values=self.new_values,
        )


class GraphTriggerRequest(TriggerRequest):
    """Trigger payload for a graph run; trigger_type defaults to manual."""

    trigger_type: str = Field(default="manual", min_length=1, max_length=64)
    entity_type: str = Field(
        default="",
        max_length=128,
        validation_alias=AliasChoices("entity_type", "entity"),
    )


class ActionOutcomeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    action_id: str
    action_type: str
    status: StepStatus
    output: dict[str, Any] | None = None
    error: str | None = None


class WorkflowRunResponse(BaseModel):
    """Result of one matched workflow."""

    model_config = ConfigDict(from_attributes=True)

    workflow_id: str
    workflow_name: str
    entity_type: str
    entity_id: str | None
    status: ExecutionStatus
    actions_executed: int
    actions_failed: int
    action_log: list[ActionOutcomeResponse]
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None


class TriggerResponse(BaseModel):
    """Response for POST /automation/triggers."""

    executed_workflow_ids: list[str] = Field(
        ..., description="Ids of matched workflows that completed"
    )
    results: list[WorkflowRunResponse]


class NodeSchema(BaseModel):
    """A graph node as authored (type tag, config document, ports)."""

    id: str = Field(..., min_length=1, max_length=128)
    node_type: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("node_type", "type")
    )
    config: dict[str, Any] = Field(default_factory=dict)
    inputs: list[str] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)
    position: dict[str, float] = Field(default_factory=dict)
    is_enabled: bool = True
    label: str | None = None


class EdgeSchema(BaseModel):
    """Connects source_node_id.source_port to target_node_id.target_port."""

    id: str | None = None
    source_node_id: str = Field(
        ..., validation_alias=AliasChoices("source_node_id", "source")
    )
    source_port: str = "out"
    target_node_id: str = Field(
        ..., validation_alias=AliasChoices("target_node_id", "target")
    )
    target_port: str = "in"


class GraphDefinitionSchema(BaseModel):
    """Inline node graph."""

    id: str = Field(default="inline", max_length=128)
    name: str = ""
    nodes: list[NodeSchema] = Field(..., min_length=1)
    edges: list[EdgeSchema] = Field(default_factory=list)

    def to_entity(self, tenant_id: str) -> GraphDefinition:
        return GraphDefinition(
            id=self.id,
            tenant_id=tenant_id,
            name=self.name,
            nodes=[NodeInstance(**n.model_dump()) for n in self.nodes],
            edges=[
                Edge(
                    id=e.id or f"edge_{i}",
                    source_node_id=e.source_node_id,
                    source_port=e.source_port,
                    target_node_id=e.target_node_id,
                    target_port=e.target_port,
                )
                for i, e in enumerate(self.edges)
            ],
        )


class GraphRunRequest(BaseModel):
    """Request body for POST /automation/graphs/run."""

    graph: GraphDefinitionSchema
    trigger: GraphTriggerRequest = Field(default_factory=GraphTriggerRequest)


class NodeExecutionStepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    node_id: str
    node_type: str
    status: StepStatus
    output: dict[str, Any] | None = None
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: float | None = None


class WorkflowExecutionResponse(BaseModel):
    """A graph run record: overall status plus one step per node."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    graph_id: str
    tenant_id: str
    status: ExecutionStatus
    steps: list[NodeExecutionStepResponse]
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None
