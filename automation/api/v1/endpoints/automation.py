"""Automation API: thin routes delegating to the trigger runner and graph run service."""

from typing import Annotated

from fastapi import APIRouter, Depends

from automation.api.v1.dependencies import (
    get_graph_run_service,
    get_tenant_id,
    get_triggered_workflow_runner,
)
from automation.application.use_cases.graphs import GraphRunService
from automation.application.use_cases.workflows.run_triggered_workflows import (
    TriggeredWorkflowRunner,
)
from automation.schemas.automation import (
    GraphRunRequest,
    GraphTriggerRequest,
    TriggerRequest,
    TriggerResponse,
    WorkflowExecutionResponse,
    WorkflowRunResponse,
)
from automation.shared.enums import ExecutionStatus

router = APIRouter()


@router.post("/triggers", response_model=TriggerResponse)
async def run_triggers(
    body: TriggerRequest,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    runner: Annotated[TriggeredWorkflowRunner, Depends(get_triggered_workflow_runner)],
) -> TriggerResponse:
    """Run every workflow of the tenant that matches the change event."""
    results = await runner.run_triggered_workflows(body.to_payload(tenant_id))
    return TriggerResponse(
        executed_workflow_ids=[
            r.workflow_id for r in results if r.status == ExecutionStatus.COMPLETED
        ],
        results=[WorkflowRunResponse.model_validate(r) for r in results],
    )


@router.post("/graphs/run", response_model=WorkflowExecutionResponse)
async def run_inline_graph(
    body: GraphRunRequest,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    service: Annotated[GraphRunService, Depends(get_graph_run_service)],
) -> WorkflowExecutionResponse:
    """Run an inline graph definition against a trigger payload."""
    execution = await service.run_inline(
        body.graph.to_entity(tenant_id), body.trigger.to_payload(tenant_id)
    )
    return WorkflowExecutionResponse.model_validate(execution)


@router.post("/graphs/{graph_id}/run", response_model=WorkflowExecutionResponse)
async def run_stored_graph(
    graph_id: str,
    body: GraphTriggerRequest,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    service: Annotated[GraphRunService, Depends(get_graph_run_service)],
) -> WorkflowExecutionResponse:
    """Load a graph from the authoring store and run it. 404 if unknown."""
    execution = await service.run_stored(graph_id, body.to_payload(tenant_id))
    return WorkflowExecutionResponse.model_validate(execution)
