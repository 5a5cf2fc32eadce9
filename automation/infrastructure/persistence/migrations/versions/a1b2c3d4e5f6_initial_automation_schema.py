"""initial_automation_schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_STATUSES = "'pending', 'running', 'completed', 'failed'"


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "entity_record",
        *_base_columns(),
        sa.Column("entity_type", sa.String(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_entity_record_tenant_id", "entity_record", ["tenant_id"])
    op.create_index(
        "ix_entity_record_tenant_entity_type",
        "entity_record",
        ["tenant_id", "entity_type"],
    )

    op.create_table(
        "workflow_definition",
        *_base_columns(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("trigger_type", sa.String(), nullable=False),
        sa.Column("trigger_entity", sa.String(), nullable=False),
        sa.Column("trigger_config", sa.JSON(), nullable=False),
        sa.Column("conditions", sa.JSON(), nullable=False),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_workflow_definition_tenant_id", "workflow_definition", ["tenant_id"]
    )
    op.create_index(
        "ix_workflow_definition_trigger",
        "workflow_definition",
        ["tenant_id", "trigger_type", "trigger_entity"],
    )

    op.create_table(
        "node_graph",
        *_base_columns(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("nodes", sa.JSON(), nullable=False),
        sa.Column("edges", sa.JSON(), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_node_graph_tenant_id", "node_graph", ["tenant_id"])

    op.create_table(
        "activity",
        *_base_columns(),
        sa.Column("activity_type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("entity_type", sa.String(), nullable=True),
        sa.Column("entity_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_activity_tenant_id", "activity", ["tenant_id"])
    op.create_index("ix_activity_entity_id", "activity", ["entity_id"])

    op.create_table(
        "workflow_execution",
        *_base_columns(),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("entity_type", sa.String(), nullable=False),
        sa.Column("entity_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actions_executed", sa.Integer(), nullable=False),
        sa.Column("actions_failed", sa.Integer(), nullable=False),
        sa.Column("execution_log", sa.JSON(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            f"status IN ({_STATUSES})", name="workflow_execution_status_check"
        ),
    )
    op.create_index(
        "ix_workflow_execution_tenant_id", "workflow_execution", ["tenant_id"]
    )
    op.create_index(
        "ix_workflow_execution_workflow_id", "workflow_execution", ["workflow_id"]
    )
    op.create_index("ix_workflow_execution_status", "workflow_execution", ["status"])
    op.create_index(
        "ix_workflow_execution_tenant_workflow",
        "workflow_execution",
        ["tenant_id", "workflow_id"],
    )

    op.create_table(
        "graph_execution",
        *_base_columns(),
        sa.Column("graph_id", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("steps", sa.JSON(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            f"status IN ({_STATUSES})", name="graph_execution_status_check"
        ),
    )
    op.create_index("ix_graph_execution_tenant_id", "graph_execution", ["tenant_id"])
    op.create_index("ix_graph_execution_graph_id", "graph_execution", ["graph_id"])
    op.create_index("ix_graph_execution_status", "graph_execution", ["status"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("graph_execution")
    op.drop_table("workflow_execution")
    op.drop_table("activity")
    op.drop_table("node_graph")
    op.drop_table("workflow_definition")
    op.drop_table("entity_record")
