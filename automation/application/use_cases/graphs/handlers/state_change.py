"""State change node: validated transition of a record's state field."""

from __future__ import annotations

from typing import Any

from automation.application.services.state_machines import (
    StateMachineDefinition,
    get_preset,
)
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
from automation.shared.utils.datetime import utc_now


def _resolve_machine(node: NodeInstance) -> StateMachineDefinition | None:
    spec = node.config.get("state_machine")
    if not spec:
        return None
    if isinstance(spec, dict):
        try:
            return StateMachineDefinition.from_dict(spec)
        except (KeyError, TypeError, AttributeError) as exc:
            raise ConfigurationException(
                f"Node {node.id}: invalid state_machine definition", key="state_machine"
            ) from exc
    machine = get_preset(str(spec))
    if machine is None:
        raise ConfigurationException(f"Unknown state machine: {spec}", key="state_machine")
    return machine


def _rejected(current_state: str, target_state: str, error: str) -> dict[str, Any]:
    return {
        "success": False,
        "error": error,
        "current_state": current_state,
        "target_state": target_state,
    }


class StateChangeHandler(BaseNodeHandler):
    """A disallowed transition is a normal result with success False.

    The transitions come from config.allowed_transitions, or else from
    config.state_machine: a preset name or an inline definition whose
    transitions may carry field conditions. A current state without an
    entry in the table is unconstrained. With a state machine, a record
    lacking the state field starts from the machine's initial state.
    """

    async def execute(
        self,
        node: NodeInstance,
        inputs: dict[str, Any],
        context: ExecutionContext,
    ) -> dict[str, Any]:
        record = record_input(inputs, context, "record")
        target_state = str(require_config(node, "target_state"))
        table = node.config.get("allowed_transitions")
        machine = _resolve_machine(node) if table is None else None
        state_field = str(
            node.config.get("state_field")
            or (machine.state_field if machine else "")
            or "status"
        )
        current = record.get(state_field)
        current_state = current if isinstance(current, str) else ""
        if machine is not None and not current_state:
            current_state = machine.initial_state

        if isinstance(table, dict):
            allowed = table.get(current_state)
            if isinstance(allowed, list) and target_state not in allowed:
                return _rejected(
                    current_state,
                    target_state,
                    f"Transition from '{current_state}' to '{target_state}' is not allowed",
                )
        elif machine is not None and current_state in machine.transition_table():
            reason = machine.validate_transition(current_state, target_state, record)
            if reason is not None:
                return _rejected(current_state, target_state, reason)

        updated = dict(record)
        updated[state_field] = target_state
        updated["state_changed_at"] = utc_now().isoformat()
        updated["previous_state"] = current_state
        output: dict[str, Any] = {
            "success": True,
            "previous_state": current_state,
            "new_state": target_state,
            "record": updated,
        }
        info = machine.state_info(target_state) if machine is not None else None
        if info is not None:
            output["state_name"] = info.name
            output["is_final"] = info.is_final
        return output
