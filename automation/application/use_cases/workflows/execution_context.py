"""Per-run mutable state shared by the steps of one workflow or graph run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from automation.application.dtos.trigger import TriggerPayload


@dataclass
class ExecutionContext:
    """Triggering record, its prior values and the variables produced so far.

    One instance per run; never shared across runs.
    """

    tenant_id: str
    entity_type: str
    entity_id: str | None
    new_values: dict[str, Any] = field(default_factory=dict)
    old_values: dict[str, Any] | None = None
    trigger_type: str | None = None
    variables: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_trigger(cls, payload: TriggerPayload) -> ExecutionContext:
        """Fresh context for one run; documents are copied."""
        return cls(
            tenant_id=payload.tenant_id,
            entity_type=payload.entity_type,
            entity_id=payload.entity_id,
            new_values=dict(payload.new_values),
            old_values=dict(payload.old_values) if payload.old_values is not None else None,
            trigger_type=payload.trigger_type,
        )

    def set_variable(self, name: str, value: Any) -> None:
        self.variables[name] = value

    def get_variable(self, name: str, default: Any = None) -> Any:
        return self.variables.get(name, default)

    def trigger_document(self) -> dict[str, Any]:
        """The trigger payload as a node output document."""
        return {
            "record": dict(self.new_values),
            "old_record": dict(self.old_values) if self.old_values is not None else None,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "tenant_id": self.tenant_id,
            "trigger_type": self.trigger_type,
        }
