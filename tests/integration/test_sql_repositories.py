"""SQL repository integration tests. Require Postgres; session is rolled back after each test."""

import pytest
from sqlalchemy import select

from automation.application.dtos.execution import (
    ActionOutcome,
    NodeExecutionStep,
    WorkflowExecution,
    WorkflowRunResult,
)
from automation.domain.exceptions import ResourceNotFoundException
from automation.infrastructure.persistence.models import (
    Activity,
    GraphExecutionLog,
    NodeGraph,
    WorkflowDefinition,
    WorkflowExecutionLog,
)
from automation.infrastructure.persistence.repositories import (
    ExecutionLogRepository,
    NodeGraphRepository,
    SqlActivitySink,
    SqlRecordStore,
    WorkflowDefinitionRepository,
)
from automation.shared.enums import ExecutionStatus, StepStatus
from automation.shared.utils.datetime import utc_now


@pytest.mark.requires_db
async def test_record_store_create_get_update(db_session) -> None:
    store = SqlRecordStore(db_session)
    record_id = await store.create("repo-tenant", "deal", {"stage": "New", "owner": "Alice"})

    await store.update("repo-tenant", "deal", record_id, {"stage": "Won"})

    found = await store.get("repo-tenant", "deal", record_id)
    assert found == {"id": record_id, "stage": "Won", "owner": "Alice"}


@pytest.mark.requires_db
async def test_record_store_is_tenant_scoped(db_session) -> None:
    store = SqlRecordStore(db_session)
    record_id = await store.create("repo-tenant", "deal", {"stage": "New"})
    with pytest.raises(ResourceNotFoundException):
        await store.get("other-tenant", "deal", record_id)
    with pytest.raises(ResourceNotFoundException):
        await store.update("other-tenant", "deal", record_id, {"stage": "Won"})


@pytest.mark.requires_db
async def test_workflow_definition_repo_returns_active_matches(db_session) -> None:
    db_session.add_all(
        [
            WorkflowDefinition(
                tenant_id="repo-tenant",
                name="Won",
                trigger_type="field_changed",
                trigger_entity="deal",
                trigger_config={"field": "stage", "to": "Won"},
                conditions={},
                actions=[{"type": "create_record", "config": {"entity": "task"}}],
            ),
            WorkflowDefinition(
                tenant_id="repo-tenant",
                name="Inactive",
                trigger_type="field_changed",
                trigger_entity="deal",
                trigger_config={},
                conditions={},
                actions=[],
                is_active=False,
            ),
        ]
    )
    await db_session.flush()

    repo = WorkflowDefinitionRepository(db_session)
    workflows = await repo.get_active_by_trigger("repo-tenant", "field_changed", "deal")

    assert [w.name for w in workflows] == ["Won"]
    assert workflows[0].actions[0].action_type == "create_record"
    assert workflows[0].actions[0].config == {"entity": "task"}


@pytest.mark.requires_db
async def test_node_graph_repo_builds_definition(db_session) -> None:
    row = NodeGraph(
        tenant_id="repo-tenant",
        name="Graph",
        nodes=[{"id": "start", "type": "trigger"}, {"id": "end", "type": "assignment"}],
        edges=[{"source": "start", "target": "end"}],
    )
    db_session.add(row)
    await db_session.flush()

    repo = NodeGraphRepository(db_session)
    graph = await repo.get_by_id(row.id, "repo-tenant")

    assert graph is not None
    assert graph.node_ids() == ["start", "end"]
    assert graph.edges[0].source_port == "out"
    assert await repo.get_by_id(row.id, "other-tenant") is None


@pytest.mark.requires_db
async def test_execution_log_records_runs(db_session) -> None:
    repo = ExecutionLogRepository(db_session)
    now = utc_now()
    await repo.record_workflow_run(
        WorkflowRunResult(
            workflow_id="wf-1",
            workflow_name="Won",
            tenant_id="repo-tenant",
            entity_type="deal",
            entity_id="deal-1",
            status=ExecutionStatus.FAILED,
            action_log=[
                ActionOutcome("a0", "create_record", StepStatus.COMPLETED, {"record_id": "t1"}),
                ActionOutcome("a1", "update_record", StepStatus.FAILED, error="boom"),
            ],
            error="update_record (a1): boom",
            started_at=now,
            completed_at=now,
        )
    )
    await repo.record_graph_run(
        WorkflowExecution(
            id="run-1",
            graph_id="g-1",
            tenant_id="repo-tenant",
            status=ExecutionStatus.COMPLETED,
            steps=[NodeExecutionStep("start", "trigger", StepStatus.COMPLETED, {"x": 1})],
            started_at=now,
            completed_at=now,
        )
    )

    workflow_row = (
        await db_session.execute(
            WorkflowExecutionLog.__table__.select().where(
                WorkflowExecutionLog.workflow_id == "wf-1"
            )
        )
    ).one()
    assert workflow_row.status == "failed"
    assert workflow_row.actions_executed == 1
    assert workflow_row.actions_failed == 1
    graph_row = await db_session.get(GraphExecutionLog, "run-1")
    assert graph_row is not None
    assert graph_row.steps[0]["node_id"] == "start"


@pytest.mark.requires_db
async def test_activity_sink_appends(db_session) -> None:
    sink = SqlActivitySink(db_session)
    await sink.append(
        "repo-tenant", "note", "Deal won", linked_entity_type="deal", linked_entity_id="deal-1"
    )
    rows = (
        await db_session.execute(select(Activity).where(Activity.entity_id == "deal-1"))
    ).scalars().all()
    assert [(r.activity_type, r.title, r.entity_type) for r in rows] == [("note", "Deal won", "deal")]
