"""Graph run use case: inline or stored graphs, with an audit record."""

from __future__ import annotations

from automation.application.dtos.execution import WorkflowExecution
from automation.application.dtos.trigger import TriggerPayload
from automation.application.interfaces.repositories import (
    IExecutionLogRepository,
    IGraphRepository,
)
from automation.application.use_cases.graphs.executor import GraphExecutor
from automation.domain.entities.graph import GraphDefinition
from automation.domain.exceptions import ResourceNotFoundException
from automation.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class GraphRunService:
    """Loads graphs from the authoring store and records each run."""

    def __init__(
        self,
        executor: GraphExecutor,
        graph_repo: IGraphRepository | None = None,
        execution_log: IExecutionLogRepository | None = None,
    ) -> None:
        self.executor = executor
        self.graph_repo = graph_repo
        self.execution_log = execution_log

    async def run_inline(
        self, graph: GraphDefinition, payload: TriggerPayload
    ) -> WorkflowExecution:
        execution = await self.executor.run_graph(graph, payload)
        await self._record(execution)
        return execution

    async def run_stored(
        self, graph_id: str, payload: TriggerPayload
    ) -> WorkflowExecution:
        """Run the graph with graph_id in the payload's tenant.

        Raises ResourceNotFoundException when the graph does not exist.
        """
        if self.graph_repo is None:
            raise ResourceNotFoundException("graph", graph_id)
        graph = await self.graph_repo.get_by_id(graph_id, payload.tenant_id)
        if graph is None:
            raise ResourceNotFoundException("graph", graph_id)
        return await self.run_inline(graph, payload)

    async def _record(self, execution: WorkflowExecution) -> None:
        if self.execution_log is None:
            return
        try:
            await self.execution_log.record_graph_run(execution)
        except Exception:
            logger.exception(
                "Failed to record graph run %s (graph_id=%s)",
                execution.id,
                execution.graph_id,
            )
