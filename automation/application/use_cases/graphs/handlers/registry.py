"""Registry mapping node type tags to handlers."""

from __future__ import annotations

from automation.application.use_cases.graphs.handlers.action import (
    ActionNodeHandler,
    AssignmentHandler,
)
from automation.application.use_cases.graphs.handlers.base import BaseNodeHandler
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
from automation.application.use_cases.workflows.actions import ActionDispatcher
from automation.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class NodeHandlerRegistry:
    """Node type tag -> handler. Registering a tag again replaces it."""

    def __init__(self) -> None:
        self._handlers: dict[str, BaseNodeHandler] = {}

    def register(self, node_type: str, handler: BaseNodeHandler) -> None:
        self._handlers[node_type] = handler
        logger.debug("Registered handler for node type: %s", node_type)

    def get(self, node_type: str) -> BaseNodeHandler | None:
        return self._handlers.get(node_type)

    def is_trigger(self, node_type: str) -> bool:
        handler = self._handlers.get(node_type)
        return handler is not None and handler.is_trigger

    def registered_types(self) -> list[str]:
        return sorted(self._handlers)


def build_default_registry(
    dispatcher: ActionDispatcher,
    matching_threshold: float = 0.5,
    matching_limit: int = 10,
    matching_default_radius_km: float = 10.0,
    geofence_default_radius_km: float = 5.0,
) -> NodeHandlerRegistry:
    """Registry with the built-in node types."""
    registry = NodeHandlerRegistry()
    trigger = TriggerHandler()
    for tag in ("trigger", "trigger_on_create", "trigger_on_update", "trigger_manual"):
        registry.register(tag, trigger)
    registry.register("condition", ConditionHandler())
    registry.register("switch", SwitchHandler())
    registry.register("action", ActionNodeHandler(dispatcher))
    assignment = AssignmentHandler(dispatcher)
    registry.register("assignment", assignment)
    registry.register("set_field", assignment)
    registry.register(
        "matching",
        MatchingHandler(
            threshold=matching_threshold,
            limit=matching_limit,
            default_radius_km=matching_default_radius_km,
        ),
    )
    registry.register("geofence", GeofenceHandler(geofence_default_radius_km))
    registry.register("state_change", StateChangeHandler())
    return registry
