"""Action and assignment nodes."""

from __future__ import annotations

from typing import Any

from automation.application.use_cases.graphs.handlers.base import (
    BaseNodeHandler,
    require_config,
)
from automation.application.use_cases.workflows.actions import ActionDispatcher
from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.domain.entities.graph import NodeInstance
from automation.domain.entities.workflow import ActionSpec
from automation.domain.exceptions import ConfigurationException
from automation.shared.enums import StepStatus


class ActionNodeHandler(BaseNodeHandler):
    """Runs the action named by config.action with the legacy failure policy.

    Action config is config.params when present, else the rest of config.
    """

    def __init__(self, dispatcher: ActionDispatcher) -> None:
        self.dispatcher = dispatcher

    async def execute(
        self,
        node: NodeInstance,
        inputs: dict[str, Any],
        context: ExecutionContext,
    ) -> dict[str, Any]:
        action_type = str(require_config(node, "action"))
        params = node.config.get("params")
        if isinstance(params, dict):
            action_config = dict(params)
        else:
            action_config = {k: v for k, v in node.config.items() if k != "action"}
        outcome = await self.dispatcher.dispatch(
            ActionSpec(id=node.id, action_type=action_type, config=action_config),
            context,
        )
        output: dict[str, Any] = {
            "action": action_type,
            "status": outcome.status.value,
            "success": outcome.status == StepStatus.COMPLETED,
        }
        if outcome.output:
            output.update(outcome.output)
        if outcome.error:
            output["error"] = outcome.error
        return output


class AssignmentHandler(BaseNodeHandler):
    """Sets a context variable and/or a field of the record under automation.

    The value is config.value (template-resolved) or the `value` input.
    """

    def __init__(self, dispatcher: ActionDispatcher) -> None:
        self.templates = dispatcher.template_resolver

    async def execute(
        self,
        node: NodeInstance,
        inputs: dict[str, Any],
        context: ExecutionContext,
    ) -> dict[str, Any]:
        variable = node.config.get("variable")
        field = node.config.get("field")
        if not variable and not field:
            raise ConfigurationException(
                f"Node {node.id} ({node.node_type}): set variable or field",
                key="variable",
            )
        if "value" in node.config:
            value = self.templates.resolve_value(node.config["value"], context)
        else:
            value = inputs.get("value")
        if variable:
            context.set_variable(str(variable), value)
        if field:
            context.new_values[str(field)] = value
        return {
            "action": "set_field",
            "variable": variable,
            "field": field,
            "value": value,
            "record": dict(context.new_values),
        }
