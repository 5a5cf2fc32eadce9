"""Branching nodes: condition (true/false ports) and switch (case ports)."""

from __future__ import annotations

from typing import Any

from automation.application.services.conditions import evaluate_condition, values_equal
from automation.application.use_cases.graphs.handlers.base import (
    BaseNodeHandler,
    record_input,
    require_config,
)
from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.domain.entities.graph import NodeInstance
from automation.domain.exceptions import ConfigurationException
from automation.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

TRUE_PORT = "true"
FALSE_PORT = "false"


class ConditionHandler(BaseNodeHandler):
    """Evaluates field/operator/value against the `data` (or `record`) input.

    The pass-through data is placed under the fired port's key.
    """

    async def execute(
        self,
        node: NodeInstance,
        inputs: dict[str, Any],
        context: ExecutionContext,
    ) -> dict[str, Any]:
        field = str(require_config(node, "field"))
        operator = str(node.config.get("operator") or "equals")
        compare_value = node.config.get("value")
        data = record_input(inputs, context, "data", "record")
        old_record = inputs.get("old_record")
        if not isinstance(old_record, dict):
            old_record = context.old_values
        result = evaluate_condition(field, operator, compare_value, data, old_record)
        logger.debug("Condition %s %s %r -> %s", field, operator, compare_value, result)
        return {
            "condition": result,
            "field": field,
            "operator": operator,
            "current_value": data.get(field),
            "compare_value": compare_value,
            "old_value": (old_record or {}).get(field),
            TRUE_PORT if result else FALSE_PORT: data,
        }

    def port_fires(self, node: NodeInstance, output: dict[str, Any], port: str) -> bool:
        if port == TRUE_PORT:
            return output.get("condition") is True
        if port == FALSE_PORT:
            return output.get("condition") is False
        return True


class SwitchHandler(BaseNodeHandler):
    """Routes to the first case port whose value equals record[field].

    config: field, cases ({port: value}), optional default port.
    """

    async def execute(
        self,
        node: NodeInstance,
        inputs: dict[str, Any],
        context: ExecutionContext,
    ) -> dict[str, Any]:
        field = str(require_config(node, "field"))
        cases = require_config(node, "cases")
        if not isinstance(cases, dict):
            raise ConfigurationException(
                f"Node {node.id} (switch): cases must be an object", key="cases"
            )
        data = record_input(inputs, context, "data", "record")
        value = data.get(field)
        selected = next(
            (port for port, expected in cases.items() if values_equal(value, expected)),
            node.config.get("default"),
        )
        output: dict[str, Any] = {"field": field, "value": value, "port": selected}
        if selected:
            output[str(selected)] = data
        return output

    def port_fires(self, node: NodeInstance, output: dict[str, Any], port: str) -> bool:
        cases = node.config.get("cases") or {}
        branch_ports = set(cases) | {node.config.get("default")}
        if port in branch_ports:
            return output.get("port") == port
        return True
