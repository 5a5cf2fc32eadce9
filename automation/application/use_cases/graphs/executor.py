"""Graph executor: runs a validated DAG of nodes in topological order.

Execution is sequential. A node runs when it is a root or when at least
one incoming edge fired (source completed and its port fired). A failed
node fires nothing, so only branches that depend on it are skipped.
"""

from __future__ import annotations

import heapq
import time
from collections import defaultdict
from typing import Any

from automation.application.dtos.execution import NodeExecutionStep, WorkflowExecution
from automation.application.dtos.trigger import TriggerPayload
from automation.application.use_cases.graphs.handlers.base import BaseNodeHandler
from automation.application.use_cases.graphs.handlers.registry import (
    NodeHandlerRegistry,
)
from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.domain.entities.graph import Edge, GraphDefinition, NodeInstance
from automation.domain.exceptions import CycleDetectedException, GraphValidationException
from automation.shared.enums import ExecutionStatus, StepStatus
from automation.shared.telemetry.logging import get_logger
from automation.shared.telemetry.tracing import TracedOperation, add_span_attributes, traced
from automation.shared.utils.datetime import utc_now
from automation.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


def edge_value(output: dict[str, Any], port: str) -> Any:
    """Value carried by an edge leaving `port` of a node with this output."""
    if port in output:
        return output[port]
    return output


class GraphExecutor:
    """Validates and runs node graphs against a trigger payload."""

    def __init__(self, registry: NodeHandlerRegistry) -> None:
        self.registry = registry

    def topological_order(self, graph: GraphDefinition) -> list[NodeInstance]:
        """Validate structure and return nodes in execution order.

        Ties are broken by node insertion order. Raises
        GraphValidationException for duplicate ids, unknown edge endpoints,
        a missing trigger root or unreachable nodes, and
        CycleDetectedException for cycles.
        """
        index: dict[str, int] = {}
        for i, node in enumerate(graph.nodes):
            if node.id in index:
                raise GraphValidationException(
                    f"Duplicate node id: {node.id}", details={"node_id": node.id}
                )
            index[node.id] = i

        indegree = {node.id: 0 for node in graph.nodes}
        successors: dict[str, list[str]] = defaultdict(list)
        for edge in graph.edges:
            for endpoint in (edge.source_node_id, edge.target_node_id):
                if endpoint not in index:
                    raise GraphValidationException(
                        f"Edge {edge.id} references unknown node: {endpoint}",
                        details={"edge_id": edge.id, "node_id": endpoint},
                    )
            successors[edge.source_node_id].append(edge.target_node_id)
            indegree[edge.target_node_id] += 1

        roots = [n for n in graph.nodes if indegree[n.id] == 0]
        trigger_roots = [n.id for n in roots if self.registry.is_trigger(n.node_type)]
        if not trigger_roots:
            raise GraphValidationException("Graph has no trigger node without inputs")

        remaining = dict(indegree)
        heap = [index[n.id] for n in roots]
        heapq.heapify(heap)
        order: list[NodeInstance] = []
        while heap:
            node = graph.nodes[heapq.heappop(heap)]
            order.append(node)
            for target in successors[node.id]:
                remaining[target] -= 1
                if remaining[target] == 0:
                    heapq.heappush(heap, index[target])
        if len(order) < len(graph.nodes):
            ordered = {n.id for n in order}
            raise CycleDetectedException([n.id for n in graph.nodes if n.id not in ordered])

        reached = set(trigger_roots)
        stack = list(trigger_roots)
        while stack:
            for target in successors[stack.pop()]:
                if target not in reached:
                    reached.add(target)
                    stack.append(target)
        unreachable = [n.id for n in graph.nodes if n.id not in reached]
        if unreachable:
            raise GraphValidationException(
                f"Nodes not reachable from a trigger: {', '.join(unreachable)}",
                details={"node_ids": unreachable},
            )
        return order

    @traced("automation.run_graph")
    async def run_graph(
        self, graph: GraphDefinition, payload: TriggerPayload
    ) -> WorkflowExecution:
        """Run every node once in order and return the full execution record.

        Structural errors raise before any node runs; node failures are
        recorded on the returned execution.
        """
        order = self.topological_order(graph)
        add_span_attributes(graph_id=graph.id, tenant_id=payload.tenant_id)
        context = ExecutionContext.from_trigger(payload)
        execution = WorkflowExecution(
            id=generate_cuid(),
            graph_id=graph.id,
            tenant_id=payload.tenant_id,
            status=ExecutionStatus.RUNNING,
            steps=[NodeExecutionStep(node_id=n.id, node_type=n.node_type) for n in order],
            started_at=utc_now(),
        )
        incoming: dict[str, list[Edge]] = defaultdict(list)
        for edge in graph.edges:
            incoming[edge.target_node_id].append(edge)
        handlers: dict[str, BaseNodeHandler | None] = {}
        outputs: dict[str, dict[str, Any]] = {}

        for node, step in zip(order, execution.steps):
            edges = incoming[node.id]
            fired = [e for e in edges if self._edge_fired(e, graph, handlers, outputs)]
            if (edges and not fired) or not node.is_enabled:
                step.status = StepStatus.SKIPPED
                continue
            inputs: dict[str, Any] = {}
            for edge in fired:
                inputs[edge.target_port] = edge_value(
                    outputs[edge.source_node_id], edge.source_port
                )
            handler = self.registry.get(node.node_type)
            handlers[node.id] = handler
            await self._run_node(node, step, handler, inputs, context)
            if step.status == StepStatus.COMPLETED and step.output is not None:
                outputs[node.id] = step.output

        failed = [s for s in execution.steps if s.status == StepStatus.FAILED]
        execution.status = ExecutionStatus.FAILED if failed else ExecutionStatus.COMPLETED
        if failed:
            execution.error = "; ".join(f"{s.node_id}: {s.error}" for s in failed)
        execution.completed_at = utc_now()
        logger.info(
            "Graph %s run %s finished: status=%s completed=%d failed=%d skipped=%d",
            graph.id,
            execution.id,
            execution.status.value,
            sum(1 for s in execution.steps if s.status == StepStatus.COMPLETED),
            len(failed),
            sum(1 for s in execution.steps if s.status == StepStatus.SKIPPED),
        )
        return execution

    def _edge_fired(
        self,
        edge: Edge,
        graph: GraphDefinition,
        handlers: dict[str, BaseNodeHandler | None],
        outputs: dict[str, dict[str, Any]],
    ) -> bool:
        output = outputs.get(edge.source_node_id)
        if output is None:
            return False
        handler = handlers.get(edge.source_node_id)
        if handler is None:
            return True
        source = graph.get_node(edge.source_node_id)
        return source is not None and handler.port_fires(source, output, edge.source_port)

    async def _run_node(
        self,
        node: NodeInstance,
        step: NodeExecutionStep,
        handler: BaseNodeHandler | None,
        inputs: dict[str, Any],
        context: ExecutionContext,
    ) -> None:
        step.status = StepStatus.RUNNING
        step.started_at = utc_now()
        start = time.perf_counter()
        with TracedOperation(
            f"node.{node.node_type}",
            {"node.id": node.id, "node.type": node.node_type},
        ) as op:
            if handler is None:
                logger.warning(
                    "Unknown node type '%s' (node %s): passing inputs through",
                    node.node_type,
                    node.id,
                )
                step.output = dict(inputs)
                step.status = StepStatus.COMPLETED
            else:
                try:
                    output = await handler.execute(node, inputs, context)
                except Exception as e:
                    step.status = StepStatus.FAILED
                    step.error = str(e)
                    op.set_error(str(e))
                    logger.error(
                        "Node %s (%s) failed: %s", node.id, node.node_type, e
                    )
                else:
                    step.output = output if isinstance(output, dict) else {"value": output}
                    step.status = StepStatus.COMPLETED
            op.set_attribute("node.status", step.status.value)
        step.completed_at = utc_now()
        step.duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "Node %s (%s) %s in %.2fms",
            node.id,
            node.node_type,
            step.status.value,
            step.duration_ms,
        )
