"""ActionDispatcher: per-action semantics and failure policy."""

from unittest.mock import AsyncMock

import pytest

from automation.application.services.template_resolver import TemplateResolver
from automation.application.use_cases.workflows.actions import (
    FAILURE_POLICY,
    ActionDispatcher,
)
from automation.domain.entities.workflow import ActionSpec
from automation.domain.exceptions import ConfigurationException, ResourceNotFoundException
from automation.shared.enums import ActionType, FailurePolicy, StepStatus


def _action(action_type: str, **config) -> ActionSpec:
    return ActionSpec(id=f"{action_type}-1", action_type=action_type, config=config)


def test_failure_policy_table_covers_every_action_type() -> None:
    assert set(FAILURE_POLICY) == set(ActionType.values())
    assert FAILURE_POLICY["send_notification"] == FailurePolicy.BEST_EFFORT
    assert FAILURE_POLICY["log_activity"] == FailurePolicy.BEST_EFFORT
    assert FAILURE_POLICY["update_record"] == FailurePolicy.FAIL_FAST


async def test_update_record_merges_resolved_fields(dispatcher, record_store, make_context) -> None:
    record_store.put("tenant-1", "deal", "deal-1", {"stage": "New", "name": "Big"})
    context = make_context(new_values={"stage": "Won", "owner": "Alice"})

    outcome = await dispatcher.dispatch(
        _action("update_record", entity="deal", set_fields={"note": "Won by {{deal.owner}}"}),
        context,
    )

    assert outcome.status == StepStatus.COMPLETED
    stored = await record_store.get("tenant-1", "deal", "deal-1")
    assert stored == {"id": "deal-1", "stage": "New", "name": "Big", "note": "Won by Alice"}


async def test_update_record_without_entity_raises(dispatcher, make_context) -> None:
    with pytest.raises(ConfigurationException) as exc_info:
        await dispatcher.dispatch(_action("update_record", set_fields={"a": 1}), make_context())
    assert exc_info.value.details == {"key": "entity"}


async def test_update_record_missing_record_raises(dispatcher, make_context) -> None:
    with pytest.raises(ResourceNotFoundException):
        await dispatcher.dispatch(
            _action("update_record", entity="deal", set_fields={"a": 1}), make_context()
        )


async def test_create_record_stores_output_variable(dispatcher, record_store, make_context) -> None:
    context = make_context(new_values={"owner": "Alice"})
    outcome = await dispatcher.dispatch(
        _action(
            "create_record",
            entity="task",
            set_fields={"title": "Call {{deal.owner}}"},
            output_var="task",
        ),
        context,
    )
    tasks = record_store.list_records("tenant-1", "task")
    assert len(tasks) == 1
    assert tasks[0]["title"] == "Call Alice"
    assert outcome.output["record_id"] == tasks[0]["id"]
    assert context.get_variable("task.id") == tasks[0]["id"]


async def test_create_record_unsupported_entity_is_noop(dispatcher, record_store, make_context) -> None:
    outcome = await dispatcher.dispatch(
        _action("create_record", entity="invoice", set_fields={"total": 1}), make_context()
    )
    assert outcome.status == StepStatus.COMPLETED
    assert outcome.output == {"entity": "invoice", "created": False}
    assert record_store.list_records("tenant-1", "invoice") == []


async def test_upsert_record_always_creates(dispatcher, record_store, make_context) -> None:
    for _ in range(2):
        await dispatcher.dispatch(
            _action("upsert_record", entity="contact", set_fields={"email": "a@b.c"},
                    match_fields=["email"]),
            make_context(),
        )
    assert len(record_store.list_records("tenant-1", "contact")) == 2


async def test_log_activity_appends_resolved_title(dispatcher, activity_sink, make_context) -> None:
    context = make_context(new_values={"name": "Big deal"})
    outcome = await dispatcher.dispatch(
        _action("log_activity", title="{{deal.name}} closed", activity_type="note"), context
    )
    assert outcome.status == StepStatus.COMPLETED
    assert activity_sink.entries == [
        {
            "tenant_id": "tenant-1",
            "activity_type": "note",
            "title": "Big deal closed",
            "content": None,
            "entity_type": "deal",
            "entity_id": "deal-1",
        }
    ]


async def test_log_activity_failure_is_best_effort(record_store, make_context) -> None:
    sink = AsyncMock()
    sink.append = AsyncMock(side_effect=RuntimeError("sink down"))
    dispatcher = ActionDispatcher(record_store, activity_sink=sink)

    outcome = await dispatcher.dispatch(_action("log_activity", title="x"), make_context())

    assert outcome.status == StepStatus.FAILED
    assert outcome.error == "sink down"


async def test_send_notification_failure_is_best_effort(record_store, make_context) -> None:
    notifier = AsyncMock()
    notifier.send = AsyncMock(side_effect=ConnectionError("smtp unreachable"))
    dispatcher = ActionDispatcher(record_store, notification_service=notifier)

    outcome = await dispatcher.dispatch(
        _action("send_notification", channel="email", to="owner@example.com"), make_context()
    )

    assert outcome.status == StepStatus.FAILED
    assert "smtp unreachable" in outcome.error


async def test_send_notification_resolves_params(record_store, make_context) -> None:
    notifier = AsyncMock()
    dispatcher = ActionDispatcher(record_store, notification_service=notifier)
    context = make_context(new_values={"owner_email": "alice@example.com", "name": "Big"})

    outcome = await dispatcher.dispatch(
        _action(
            "send_notification",
            template="deal_won",
            to="{{deal.owner_email}}",
            params={"owner": "{{deal.name}} owner"},
        ),
        context,
    )

    assert outcome.status == StepStatus.COMPLETED
    notifier.send.assert_awaited_once_with(
        "email",
        "deal_won",
        "alice@example.com",
        {"owner": "Big owner", "record": {"owner_email": "alice@example.com", "name": "Big"}},
    )


async def test_send_notification_without_service_is_skipped(dispatcher, make_context) -> None:
    outcome = await dispatcher.dispatch(_action("send_notification", to="x@y.z"), make_context())
    assert outcome.status == StepStatus.COMPLETED
    assert outcome.output["sent"] is False


async def test_assign_agent_is_placeholder(dispatcher, make_context) -> None:
    context = make_context()
    outcome = await dispatcher.dispatch(_action("assign_agent", output_var="agent"), context)
    assert outcome.output["method"] == "round_robin"
    assert outcome.output["agent_id"]
    assert context.get_variable("agent.id") == outcome.output["agent_id"]


async def test_unknown_action_type_is_skipped(dispatcher, make_context) -> None:
    outcome = await dispatcher.dispatch(_action("launch_rocket"), make_context())
    assert outcome.status == StepStatus.SKIPPED
    assert outcome.error == "Unknown action type: launch_rocket"


def test_template_resolver_is_exposed(record_store) -> None:
    resolver = TemplateResolver(["lead"])
    dispatcher = ActionDispatcher(record_store, template_resolver=resolver)
    assert dispatcher.template_resolver is resolver
