"""Node handler contract for the graph executor.

A handler is stateless across invocations: run-scoped state lives in the
ExecutionContext or flows through named inputs and outputs. New node
types plug in by subclassing BaseNodeHandler and registering a tag.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.domain.entities.graph import NodeInstance
from automation.domain.exceptions import ConfigurationException


class BaseNodeHandler(ABC):
    """Executes one node and decides which of its output ports fire."""

    #: Trigger handlers are valid graph roots.
    is_trigger: bool = False

    @abstractmethod
    async def execute(
        self,
        node: NodeInstance,
        inputs: dict[str, Any],
        context: ExecutionContext,
    ) -> dict[str, Any]:
        """Return the node's output document or raise on failure."""

    def port_fires(self, node: NodeInstance, output: dict[str, Any], port: str) -> bool:
        """Whether an edge leaving `port` carries output downstream."""
        return True


def require_config(node: NodeInstance, key: str) -> Any:
    """Return node.config[key] or raise ConfigurationException."""
    value = node.config.get(key)
    if value is None or value == "":
        raise ConfigurationException(
            f"Node {node.id} ({node.node_type}): missing {key}", key=key
        )
    return value


def record_input(inputs: dict[str, Any], context: ExecutionContext, *keys: str) -> dict[str, Any]:
    """First dict-valued input among keys, else the run's new values."""
    for key in keys:
        value = inputs.get(key)
        if isinstance(value, dict):
            return value
    return context.new_values
