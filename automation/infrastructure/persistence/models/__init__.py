"""Persistence models: ORM entities and mixins."""

from automation.infrastructure.persistence.models.entity_record import EntityRecord
from automation.infrastructure.persistence.models.execution import (
    Activity,
    GraphExecutionLog,
    WorkflowExecutionLog,
)
from automation.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    TenantMixin,
    TimestampMixin,
)
from automation.infrastructure.persistence.models.workflow_definition import (
    NodeGraph,
    WorkflowDefinition,
)

__all__ = [
    "Activity",
    "CuidMixin",
    "EntityRecord",
    "GraphExecutionLog",
    "MultiTenantModel",
    "NodeGraph",
    "TenantMixin",
    "TimestampMixin",
    "WorkflowDefinition",
    "WorkflowExecutionLog",
]
