"""Node handlers: trigger, branching, action, matching, geofence, state change."""

import pytest

from automation.application.services.scoring import haversine_km
from automation.application.use_cases.graphs.handlers import registry as registry_module
from automation.application.use_cases.graphs.handlers.action import (
    ActionNodeHandler,
    AssignmentHandler,
)
from automation.application.use_cases.graphs.handlers.condition import (
    ConditionHandler,
    SwitchHandler,
)
from automation.application.use_cases.graphs.handlers.geofence import GeofenceHandler
from automation.application.use_cases.graphs.handlers.matching import MatchingHandler
from automation.application.use_cases.graphs.handlers.state_change import (
    StateChangeHandler,
)
from automation.application.use_cases.graphs.handlers.trigger import TriggerHandler
from automation.domain.entities.graph import NodeInstance
from automation.domain.exceptions import ConfigurationException, InputException


def _node(node_type: str, **config) -> NodeInstance:
    return NodeInstance(id=f"{node_type}-1", node_type=node_type, config=config)


CENTER = (52.5200, 13.4050)


async def test_trigger_emits_payload(make_context) -> None:
    context = make_context(new_values={"stage": "Won"}, old_values={"stage": "New"})
    output = await TriggerHandler().execute(_node("trigger"), {}, context)
    assert output == {
        "record": {"stage": "Won"},
        "old_record": {"stage": "New"},
        "entity_type": "deal",
        "entity_id": "deal-1",
        "tenant_id": "tenant-1",
        "trigger_type": "field_changed",
    }


async def test_condition_reads_data_input_and_fires_one_port(make_context) -> None:
    handler = ConditionHandler()
    node = _node("condition", field="price", operator="gt", value=100)
    output = await handler.execute(node, {"data": {"price": 50}}, make_context())
    assert output["condition"] is False
    assert output["false"] == {"price": 50}
    assert handler.port_fires(node, output, "false")
    assert not handler.port_fires(node, output, "true")
    assert handler.port_fires(node, output, "out")


async def test_condition_requires_field(make_context) -> None:
    with pytest.raises(ConfigurationException):
        await ConditionHandler().execute(_node("condition"), {}, make_context())


async def test_switch_selects_case_or_default(make_context) -> None:
    handler = SwitchHandler()
    node = _node("switch", field="stage", cases={"won": "Won", "lost": "Lost"}, default="other")

    won = await handler.execute(node, {}, make_context(new_values={"stage": "Won"}))
    assert won["port"] == "won"
    assert handler.port_fires(node, won, "won")
    assert not handler.port_fires(node, won, "lost")
    assert not handler.port_fires(node, won, "other")

    other = await handler.execute(node, {}, make_context(new_values={"stage": "New"}))
    assert other["port"] == "other"
    assert other["other"] == {"stage": "New"}


async def test_action_node_reports_best_effort_failure(dispatcher, make_context) -> None:
    handler = ActionNodeHandler(dispatcher)
    node = _node("action", action="send_notification", params={"to": "a@b.c"})
    output = await handler.execute(node, {}, make_context())
    # No notification service configured: skipped, not failed.
    assert output["success"] is True
    assert output["sent"] is False


async def test_action_node_uses_flat_config(dispatcher, record_store, make_context) -> None:
    handler = ActionNodeHandler(dispatcher)
    node = _node("action", action="create_record", entity="task", set_fields={"title": "x"})
    output = await handler.execute(node, {}, make_context())
    assert output["created"] is True
    assert output["status"] == "completed"
    assert len(record_store.list_records("tenant-1", "task")) == 1


async def test_assignment_sets_variable_and_field(dispatcher, make_context) -> None:
    handler = AssignmentHandler(dispatcher)
    context = make_context(new_values={"owner": "Alice"})
    node = _node("set_field", variable="lead.owner", field="assignee", value="{{deal.owner}}")
    output = await handler.execute(node, {}, context)
    assert output["value"] == "Alice"
    assert context.get_variable("lead.owner") == "Alice"
    assert context.new_values["assignee"] == "Alice"


async def test_assignment_requires_target(dispatcher, make_context) -> None:
    with pytest.raises(ConfigurationException):
        await AssignmentHandler(dispatcher).execute(_node("assignment", value=1), {}, make_context())


async def test_matching_ranks_candidates_from_inputs(make_context) -> None:
    handler = MatchingHandler(threshold=0.5, limit=10)
    lead = {"id": "lead-1", "budget_min": 100, "budget_max": 200, "property_type": "flat"}
    properties = [
        {"id": "p-over", "price": 1000, "property_type": "house"},
        {"id": "p-fit", "price": 150, "property_type": "flat"},
    ]
    output = await handler.execute(
        _node("matching"), {"lead": lead, "properties": properties}, make_context()
    )
    assert output["lead_id"] == "lead-1"
    assert output["total_matched"] == 1
    assert output["matches"][0]["property_id"] == "p-fit"


async def test_matching_config_overrides_threshold(make_context) -> None:
    handler = MatchingHandler()
    properties = [{"id": "p1", "price": 1000, "property_type": "house"}]
    node = _node("matching", threshold=0, limit=5)
    output = await handler.execute(
        node, {"lead": {"budget_max": 100, "property_type": "flat"}, "properties": properties},
        make_context(),
    )
    assert output["total_matched"] == 1


async def test_matching_rejects_non_list_candidates(make_context) -> None:
    with pytest.raises(InputException):
        await MatchingHandler().execute(_node("matching"), {"properties": "p1"}, make_context())


async def test_geofence_boundary_point_is_inside(make_context) -> None:
    point = (52.5300, 13.4050)
    distance = haversine_km(*CENTER, *point)
    node = _node("geofence", latitude=CENTER[0], longitude=CENTER[1], radius_km=distance)
    output = await GeofenceHandler().execute(
        node, {"latitude": point[0], "longitude": point[1]}, make_context()
    )
    assert output["is_inside"] is True
    assert output["distance_km"] == distance


async def test_geofence_center_from_inputs_and_default_radius(make_context) -> None:
    output = await GeofenceHandler(default_radius_km=5.0).execute(
        _node("geofence"),
        {"center_lat": CENTER[0], "center_lng": CENTER[1], "lat": 52.6, "lng": 13.405},
        make_context(),
    )
    assert output["radius_km"] == 5.0
    assert output["is_inside"] is False


async def test_geofence_batch_points(make_context) -> None:
    node = _node("geofence", latitude=CENTER[0], longitude=CENTER[1], radius_km=2)
    points = [
        {"id": "near", "lat": 52.521, "lng": 13.406},
        {"id": "far", "lat": 48.1351, "lng": 11.582},
        {"id": "broken"},
    ]
    output = await GeofenceHandler().execute(node, {"points": points}, make_context())
    assert output["total"] == 3
    assert output["inside_count"] == 1
    assert output["results"][2] == {"id": "broken", "error": "Missing coordinates"}


async def test_geofence_without_coordinates_is_input_error(make_context) -> None:
    node = _node("geofence", latitude=CENTER[0], longitude=CENTER[1])
    with pytest.raises(InputException):
        await GeofenceHandler().execute(node, {}, make_context())


async def test_geofence_without_center_is_configuration_error(make_context) -> None:
    with pytest.raises(ConfigurationException):
        await GeofenceHandler().execute(_node("geofence"), {"lat": 1, "lng": 2}, make_context())


async def test_state_change_disallowed_transition_is_a_result(make_context) -> None:
    context = make_context(new_values={"status": "draft"})
    node = _node(
        "state_change", target_state="approved", allowed_transitions={"draft": ["submitted"]}
    )
    output = await StateChangeHandler().execute(node, {}, context)
    assert output["success"] is False
    assert output["current_state"] == "draft"
    assert context.new_values == {"status": "draft"}


async def test_state_change_allowed_transition(make_context) -> None:
    context = make_context(new_values={"status": "draft"})
    node = _node(
        "state_change", target_state="submitted", allowed_transitions={"draft": ["submitted"]}
    )
    output = await StateChangeHandler().execute(node, {}, context)
    assert output["success"] is True
    assert output["previous_state"] == "draft"
    assert output["record"]["status"] == "submitted"
    assert output["record"]["previous_state"] == "draft"
    assert "state_changed_at" in output["record"]
    assert context.new_values == {"status": "draft"}


async def test_state_change_unlisted_state_is_unconstrained(make_context) -> None:
    node = _node("state_change", target_state="x", allowed_transitions={"draft": ["submitted"]})
    output = await StateChangeHandler().execute(node, {"record": {"status": "archived"}}, make_context())
    assert output["success"] is True


async def test_state_change_uses_preset(make_context) -> None:
    handler = StateChangeHandler()
    record = {"record": {"stage": "lead"}}
    blocked = await handler.execute(
        _node("state_change", target_state="closed_won", state_machine="deal"), record, make_context()
    )
    assert blocked["success"] is False
    allowed = await handler.execute(
        _node("state_change", target_state="closed_lost", state_machine="deal"), record, make_context()
    )
    assert allowed["success"] is True
    assert allowed["record"]["stage"] == "closed_lost"
    assert allowed["state_name"] == "Closed Lost"
    assert allowed["is_final"] is True


async def test_state_change_preset_starts_from_initial_state(make_context) -> None:
    node = _node("state_change", target_state="qualified", state_machine="deal")
    output = await StateChangeHandler().execute(node, {"record": {}}, make_context())
    assert output["success"] is True
    assert output["previous_state"] == "lead"
    assert output["is_final"] is False


OFFER_MACHINE = {
    "state_field": "status",
    "transitions": [
        {
            "from": "draft",
            "to": "sent",
            "conditions": [{"field": "amount", "operator": "gt", "value": 0}],
        }
    ],
}


async def test_state_change_failing_condition_blocks_transition(make_context) -> None:
    node = _node("state_change", target_state="sent", state_machine=OFFER_MACHINE)
    output = await StateChangeHandler().execute(
        node, {"record": {"status": "draft", "amount": 0}}, make_context()
    )
    assert output == {
        "success": False,
        "error": "Condition not met: amount gt 0",
        "current_state": "draft",
        "target_state": "sent",
    }


async def test_state_change_met_condition_allows_transition(make_context) -> None:
    node = _node("state_change", target_state="sent", state_machine=OFFER_MACHINE)
    output = await StateChangeHandler().execute(
        node, {"record": {"status": "draft", "amount": 250}}, make_context()
    )
    assert output["success"] is True
    assert output["record"]["status"] == "sent"


async def test_state_change_invalid_inline_machine(make_context) -> None:
    node = _node(
        "state_change", target_state="sent", state_machine={"transitions": [{"from": "draft"}]}
    )
    with pytest.raises(ConfigurationException):
        await StateChangeHandler().execute(node, {}, make_context())


async def test_state_change_unknown_preset(make_context) -> None:
    node = _node("state_change", target_state="x", state_machine="spaceship")
    with pytest.raises(ConfigurationException):
        await StateChangeHandler().execute(node, {}, make_context())


def test_default_registry_tags(dispatcher) -> None:
    registry = registry_module.build_default_registry(dispatcher)
    assert registry.registered_types() == sorted(
        [
            "action",
            "assignment",
            "condition",
            "geofence",
            "matching",
            "set_field",
            "state_change",
            "switch",
            "trigger",
            "trigger_manual",
            "trigger_on_create",
            "trigger_on_update",
        ]
    )
    assert registry.is_trigger("trigger_on_create")
    assert not registry.is_trigger("condition")
    assert registry.get("unknown") is None


def test_registering_a_tag_again_replaces_handler(dispatcher) -> None:
    registry = registry_module.build_default_registry(dispatcher)
    custom = ConditionHandler()
    registry.register("condition", custom)
    assert registry.get("condition") is custom
