"""Legacy trigger-action runner: end-to-end over in-memory stores."""

from unittest.mock import AsyncMock

import pytest

from automation.application.dtos.trigger import TriggerPayload
from automation.application.use_cases.workflows.actions import ActionDispatcher
from automation.application.use_cases.workflows.run_triggered_workflows import (
    TriggeredWorkflowRunner,
)
from automation.application.use_cases.workflows.trigger_matcher import TriggerMatcher
from automation.domain.exceptions import PersistenceException
from automation.shared.enums import ExecutionStatus, StepStatus

_WON = {"field": "stage", "to": "Won"}
_CONGRATULATE = {
    "type": "create_record",
    "config": {"entity": "task", "set_fields": {"title": "Send congratulations to {{deal.owner}}"}},
}


@pytest.fixture
def runner(workflow_repo, dispatcher, execution_log) -> TriggeredWorkflowRunner:
    return TriggeredWorkflowRunner(TriggerMatcher(workflow_repo), dispatcher, execution_log)


async def _fire(runner: TriggeredWorkflowRunner, old: dict | None, new: dict) -> list[str]:
    return await runner.execute_triggered_workflows(
        tenant_id="tenant-1",
        trigger_type="field_changed",
        entity_type="deal",
        entity_id="deal-1",
        old_values=old,
        new_values=new,
    )


async def test_deal_won_creates_congratulation_task(
    runner, workflow_repo, record_store, make_workflow
) -> None:
    workflow_repo.add(make_workflow("wf-1", [_CONGRATULATE], trigger_config=_WON))

    executed = await _fire(runner, {"stage": "New"}, {"stage": "Won", "owner": "Alice"})

    assert executed == ["wf-1"]
    tasks = record_store.list_records("tenant-1", "task")
    assert len(tasks) == 1
    assert tasks[0]["title"] == "Send congratulations to Alice"


async def test_missing_owner_leaves_placeholder_literal(
    runner, workflow_repo, record_store, make_workflow
) -> None:
    workflow_repo.add(make_workflow("wf-1", [_CONGRATULATE], trigger_config=_WON))

    await _fire(runner, {"stage": "New"}, {"stage": "Won"})

    tasks = record_store.list_records("tenant-1", "task")
    assert [t["title"] for t in tasks] == ["Send congratulations to {{deal.owner}}"]


async def test_already_won_does_not_refire(runner, workflow_repo, record_store, make_workflow) -> None:
    workflow_repo.add(make_workflow("wf-1", [_CONGRATULATE], trigger_config=_WON))

    executed = await _fire(runner, {"stage": "Won"}, {"stage": "Won", "owner": "Alice"})

    assert executed == []
    assert record_store.list_records("tenant-1", "task") == []


async def test_fail_fast_aborts_only_its_workflow(
    runner, workflow_repo, record_store, execution_log, make_workflow
) -> None:
    workflow_repo.add(
        make_workflow(
            "wf-broken",
            [
                {"type": "create_record", "entity": "task", "set_fields": {"title": "first"}},
                {"type": "update_record", "entity": "deal", "record_id": "missing",
                 "set_fields": {"a": 1}},
                {"type": "create_record", "entity": "task", "set_fields": {"title": "never"}},
            ],
            trigger_config=_WON,
        )
    )
    workflow_repo.add(make_workflow("wf-ok", [_CONGRATULATE], trigger_config=_WON))

    executed = await _fire(runner, {"stage": "New"}, {"stage": "Won", "owner": "Bob"})

    assert executed == ["wf-ok"]
    titles = sorted(t["title"] for t in record_store.list_records("tenant-1", "task"))
    # No rollback of the action that ran before the failure.
    assert titles == ["Send congratulations to Bob", "first"]

    broken, ok = execution_log.workflow_runs
    assert broken.status == ExecutionStatus.FAILED
    assert [o.status for o in broken.action_log] == [StepStatus.COMPLETED, StepStatus.FAILED]
    assert broken.actions_executed == 1
    assert broken.actions_failed == 1
    assert "deal not found: missing" in broken.error
    assert ok.status == ExecutionStatus.COMPLETED


async def test_best_effort_failure_does_not_abort(
    workflow_repo, record_store, execution_log, make_workflow
) -> None:
    notifier = AsyncMock()
    notifier.send = AsyncMock(side_effect=RuntimeError("provider down"))
    dispatcher = ActionDispatcher(record_store, notification_service=notifier)
    runner = TriggeredWorkflowRunner(TriggerMatcher(workflow_repo), dispatcher, execution_log)
    workflow_repo.add(
        make_workflow(
            "wf-1",
            [{"type": "send_notification", "to": "a@b.c"}, _CONGRATULATE],
            trigger_config=_WON,
        )
    )

    results = await runner.run_triggered_workflows(
        TriggerPayload(
            tenant_id="tenant-1",
            trigger_type="field_changed",
            entity_type="deal",
            entity_id="deal-1",
            old_values={"stage": "New"},
            new_values={"stage": "Won"},
        )
    )

    assert results[0].status == ExecutionStatus.COMPLETED
    assert [o.status for o in results[0].action_log] == [StepStatus.FAILED, StepStatus.COMPLETED]
    assert len(record_store.list_records("tenant-1", "task")) == 1


async def test_audit_write_failure_does_not_fail_run(workflow_repo, dispatcher, make_workflow) -> None:
    log = AsyncMock()
    log.record_workflow_run = AsyncMock(side_effect=PersistenceException("db down"))
    runner = TriggeredWorkflowRunner(TriggerMatcher(workflow_repo), dispatcher, log)
    workflow_repo.add(make_workflow("wf-1", [_CONGRATULATE], trigger_config=_WON))

    executed = await _fire(runner, {"stage": "New"}, {"stage": "Won"})

    assert executed == ["wf-1"]
    log.record_workflow_run.assert_awaited_once()


async def test_matcher_failure_raises(dispatcher, execution_log) -> None:
    repo = AsyncMock()
    repo.get_active_by_trigger = AsyncMock(side_effect=PersistenceException("db down"))
    runner = TriggeredWorkflowRunner(TriggerMatcher(repo), dispatcher, execution_log)

    with pytest.raises(PersistenceException):
        await _fire(runner, {"stage": "New"}, {"stage": "Won"})
    assert execution_log.workflow_runs == []


async def test_each_workflow_gets_a_fresh_context(
    runner, workflow_repo, record_store, make_workflow
) -> None:
    workflow_repo.add(
        make_workflow(
            "wf-a",
            [{"type": "create_record", "entity": "task", "set_fields": {"title": "a"},
              "output_var": "task"}],
            trigger_config=_WON,
        )
    )
    workflow_repo.add(
        make_workflow(
            "wf-b",
            [{"type": "create_record", "entity": "task", "set_fields": {"title": "b {{task.id}}"}}],
            trigger_config=_WON,
        )
    )

    await _fire(runner, {"stage": "New"}, {"stage": "Won"})

    titles = sorted(t["title"] for t in record_store.list_records("tenant-1", "task"))
    assert titles == ["a", "b {{task.id}}"]
