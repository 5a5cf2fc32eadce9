"""Activity and execution audit ORM models."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from automation.infrastructure.persistence.database import Base
from automation.infrastructure.persistence.models.mixins import MultiTenantModel
from automation.shared.enums import ExecutionStatus


def _status_check(name: str) -> CheckConstraint:
    return CheckConstraint(
        "status IN ({})".format(
            ", ".join("'{}'".format(v) for v in ExecutionStatus.values())
        ),
        name=name,
    )


class Activity(MultiTenantModel, Base):
    """Activity entry appended by log_activity. Table: activity."""

    __tablename__ = "activity"

    activity_type: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    entity_type: Mapped[str | None] = mapped_column(String, nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)


class WorkflowExecutionLog(MultiTenantModel, Base):
    """Legacy workflow run audit. Table: workflow_execution."""

    __tablename__ = "workflow_execution"

    workflow_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=ExecutionStatus.PENDING.value, index=True
    )
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    actions_executed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    actions_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    execution_log: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSON, nullable=True
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_workflow_execution_tenant_workflow", "tenant_id", "workflow_id"),
        _status_check("workflow_execution_status_check"),
    )


class GraphExecutionLog(MultiTenantModel, Base):
    """Graph run audit (the whole execution record). Table: graph_execution."""

    __tablename__ = "graph_execution"

    graph_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=ExecutionStatus.PENDING.value, index=True
    )
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    steps: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (_status_check("graph_execution_status_check"),)
