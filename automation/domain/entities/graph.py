"""Node graph domain entities.

A graph is a set of typed node instances connected by edges from a named
output port to a named input port. Configuration documents are loosely
typed; each node handler validates the keys it needs.
"""

from dataclasses import dataclass, field
from typing import Any

from automation.domain.exceptions import ValidationException


def _enabled_flag(value: Any) -> bool:
    """Missing means enabled; otherwise a boolean or "true"/"false"."""
    if value is None or isinstance(value, bool):
        return value is not False
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationException(
        f"is_enabled must be a boolean, got {value!r}", field="is_enabled"
    )


@dataclass(frozen=True)
class NodeInstance:
    """A node in a graph: type tag, config document and declared ports.

    position is a UI concern and is carried through untouched.
    """

    id: str
    node_type: str
    config: dict[str, Any] = field(default_factory=dict)
    inputs: list[str] = field(default_factory=list)
    outputs: list[str] = field(default_factory=list)
    position: dict[str, float] = field(default_factory=dict)
    is_enabled: bool = True
    label: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NodeInstance":
        """Build from a stored node document (accepts type|node_type)."""
        return cls(
            id=str(data["id"]),
            node_type=str(data.get("node_type") or data.get("type") or ""),
            config=dict(data.get("config") or {}),
            inputs=list(data.get("inputs") or []),
            outputs=list(data.get("outputs") or []),
            position=dict(data.get("position") or {}),
            is_enabled=_enabled_flag(data.get("is_enabled")),
            label=data.get("label"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "node_type": self.node_type,
            "config": self.config,
            "inputs": self.inputs,
            "outputs": self.outputs,
            "position": self.position,
            "is_enabled": self.is_enabled,
            "label": self.label,
        }


@dataclass(frozen=True)
class Edge:
    """Connects source_node_id.source_port to target_node_id.target_port."""

    id: str
    source_node_id: str
    source_port: str
    target_node_id: str
    target_port: str

    @classmethod
    def from_dict(cls, data: dict[str, Any], index: int = 0) -> "Edge":
        """Build from a stored edge document (ports default to out/in)."""
        return cls(
            id=str(data.get("id") or f"edge_{index}"),
            source_node_id=str(data.get("source_node_id") or data["source"]),
            source_port=str(data.get("source_port") or "out"),
            target_node_id=str(data.get("target_node_id") or data["target"]),
            target_port=str(data.get("target_port") or "in"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_node_id": self.source_node_id,
            "source_port": self.source_port,
            "target_node_id": self.target_node_id,
            "target_port": self.target_port,
        }


@dataclass
class GraphDefinition:
    """Domain entity for a node graph (nodes in insertion order + edges)."""

    id: str
    tenant_id: str
    name: str
    nodes: list[NodeInstance]
    edges: list[Edge]
    is_active: bool = True

    def node_ids(self) -> list[str]:
        """Node ids in insertion order."""
        return [n.id for n in self.nodes]

    def get_node(self, node_id: str) -> NodeInstance | None:
        """Return the node with the given id, or None."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    @classmethod
    def from_documents(
        cls,
        graph_id: str,
        tenant_id: str,
        name: str,
        nodes: list[dict[str, Any]],
        edges: list[dict[str, Any]],
        is_active: bool = True,
    ) -> "GraphDefinition":
        """Build from stored node and edge documents."""
        return cls(
            id=graph_id,
            tenant_id=tenant_id,
            name=name,
            nodes=[NodeInstance.from_dict(n) for n in nodes],
            edges=[Edge.from_dict(e, i) for i, e in enumerate(edges)],
            is_active=is_active,
        )
