"""DTOs for incoming change events (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TriggerPayload:
    """A change event for one record.

    old_values is None when the record was just created.
    """

    tenant_id: str
    trigger_type: str
    entity_type: str
    entity_id: str | None = None
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        tenant_id: str,
        default_trigger_type: str = "manual",
    ) -> TriggerPayload:
        """Build from a loosely shaped document.

        Accepts entity|entity_type, old|old_values, new|new_values,
        entity_id|record_id.
        """
        old = data.get("old_values", data.get("old"))
        new = data.get("new_values", data.get("new")) or {}
        entity_id = data.get("entity_id", data.get("record_id"))
        return cls(
            tenant_id=tenant_id,
            trigger_type=str(data.get("trigger_type") or default_trigger_type),
            entity_type=str(data.get("entity_type") or data.get("entity") or ""),
            entity_id=str(entity_id) if entity_id is not None else None,
            old_values=dict(old) if isinstance(old, dict) else None,
            new_values=dict(new),
        )
