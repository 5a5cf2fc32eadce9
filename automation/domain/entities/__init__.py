"""Domain entities.

Pure domain models; no ORM or persistence concerns.
"""

from automation.domain.entities.graph import Edge, GraphDefinition, NodeInstance
from automation.domain.entities.workflow import ActionSpec, WorkflowDefinitionEntity

__all__ = [
    "ActionSpec",
    "Edge",
    "GraphDefinition",
    "NodeInstance",
    "WorkflowDefinitionEntity",
]
