"""WorkflowDefinition and NodeGraph ORM models (authoring store)."""

from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from automation.infrastructure.persistence.database import Base
from automation.infrastructure.persistence.models.mixins import MultiTenantModel


class WorkflowDefinition(MultiTenantModel, Base):
    """Legacy workflow definition. Table: workflow_definition."""

    __tablename__ = "workflow_definition"

    name: Mapped[str] = mapped_column(String, nullable=False)
    trigger_type: Mapped[str] = mapped_column(String, nullable=False)
    trigger_entity: Mapped[str] = mapped_column(String, nullable=False)
    trigger_config: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    conditions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    actions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.text("true")
    )

    __table_args__ = (
        Index(
            "ix_workflow_definition_trigger",
            "tenant_id",
            "trigger_type",
            "trigger_entity",
        ),
    )


class NodeGraph(MultiTenantModel, Base):
    """Node graph definition (nodes + edges JSON). Table: node_graph."""

    __tablename__ = "node_graph"

    name: Mapped[str] = mapped_column(String, nullable=False)
    nodes: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    edges: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.text("true")
    )
