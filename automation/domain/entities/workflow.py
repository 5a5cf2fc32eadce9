"""Workflow domain entity.

A workflow definition is a tenant-scoped rule: a trigger (type + entity +
trigger config) and an ordered list of actions run when the trigger holds.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ActionSpec:
    """One step of a workflow: action type tag plus a flat config bag."""

    id: str
    action_type: str
    config: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], index: int = 0) -> "ActionSpec":
        """Build from a stored action document.

        Accepts either {"type": ..., "config": {...}} or a flat document where
        every key other than id/type is configuration.
        """
        action_type = str(data.get("action_type") or data.get("type") or "")
        if isinstance(data.get("config"), dict):
            config = dict(data["config"])
        else:
            config = {
                k: v
                for k, v in data.items()
                if k not in ("id", "type", "action_type")
            }
        return cls(
            id=str(data.get("id") or f"action_{index}"),
            action_type=action_type,
            config=config,
        )


@dataclass
class WorkflowDefinitionEntity:
    """Domain entity for a legacy workflow definition (trigger + actions)."""

    id: str
    tenant_id: str
    name: str
    trigger_type: str
    trigger_entity: str
    trigger_config: dict[str, Any]
    conditions: dict[str, Any]
    actions: list[ActionSpec]
    is_active: bool = True

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        """Return whether this workflow belongs to the given tenant."""
        return self.tenant_id == tenant_id

    def can_trigger_on(self, trigger_type: str, entity_type: str) -> bool:
        """Return whether this workflow is active and matches trigger type and entity."""
        return (
            self.is_active
            and self.trigger_type == trigger_type
            and self.trigger_entity == entity_type
        )
