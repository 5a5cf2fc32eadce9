"""State machine definitions and presets.

A definition lists states and allowed transitions for one entity type. A
transition's source may be "*" (any state) and may carry field conditions
checked against the record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from automation.application.services.conditions import values_equal

WILDCARD = "*"


@dataclass(frozen=True)
class TransitionCondition:
    """Field condition on a transition (eq, ne, gt, lt, gte, lte, contains, empty, not_empty)."""

    field: str
    operator: str
    value: Any = None

    def holds(self, record: dict[str, Any]) -> bool:
        present = self.field in record
        current = record.get(self.field)
        op = self.operator
        if op == "eq":
            return present and values_equal(current, self.value)
        if op == "ne":
            return not (present and values_equal(current, self.value))
        if op == "empty":
            return current is None
        if op == "not_empty":
            return current is not None
        if op == "contains":
            return (
                isinstance(current, str)
                and isinstance(self.value, str)
                and self.value in current
            )
        if op in ("gt", "lt", "gte", "lte"):
            if not _is_number(current) or not _is_number(self.value):
                return False
            if op == "gt":
                return current > self.value
            if op == "lt":
                return current < self.value
            if op == "gte":
                return current >= self.value
            return current <= self.value
        return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class StateTransition:
    source: str
    target: str
    conditions: tuple[TransitionCondition, ...] = ()

    def matches(self, source: str, target: str) -> bool:
        return self.source in (source, WILDCARD) and self.target == target


@dataclass(frozen=True)
class StateInfo:
    code: str
    name: str
    is_final: bool = False


@dataclass(frozen=True)
class StateMachineDefinition:
    """States and allowed transitions for one entity type."""

    entity_type: str
    state_field: str
    initial_state: str
    states: tuple[StateInfo, ...]
    transitions: tuple[StateTransition, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StateMachineDefinition:
        """Build an inline definition from a node config document.

        States may be plain codes or {code, name, is_final} objects.
        Transitions use from/to keys plus optional conditions.
        """
        states = tuple(
            StateInfo(code=str(s), name=str(s))
            if not isinstance(s, dict)
            else StateInfo(
                code=str(s["code"]),
                name=str(s.get("name") or s["code"]),
                is_final=s.get("is_final") is True,
            )
            for s in data.get("states") or ()
        )
        transitions = tuple(
            StateTransition(
                source=str(t.get("from", WILDCARD)),
                target=str(t["to"]),
                conditions=tuple(
                    TransitionCondition(
                        field=str(c["field"]),
                        operator=str(c["operator"]),
                        value=c.get("value"),
                    )
                    for c in t.get("conditions") or ()
                ),
            )
            for t in data.get("transitions") or ()
        )
        if not states:
            codes = dict.fromkeys(
                code
                for t in transitions
                for code in (t.source, t.target)
                if code != WILDCARD
            )
            states = tuple(StateInfo(code=c, name=c) for c in codes)
        return cls(
            entity_type=str(data.get("entity_type") or ""),
            state_field=str(data.get("state_field") or "status"),
            initial_state=str(data.get("initial_state") or ""),
            states=states,
            transitions=transitions,
        )

    def state_info(self, code: str) -> StateInfo | None:
        return next((s for s in self.states if s.code == code), None)

    def valid_targets(self, source: str) -> list[str]:
        """Targets reachable from source, including wildcard transitions."""
        targets: list[str] = []
        for t in self.transitions:
            if t.source in (source, WILDCARD) and t.target not in targets:
                targets.append(t.target)
        return targets

    def validate_transition(
        self, source: str, target: str, record: dict[str, Any]
    ) -> str | None:
        """Return None when allowed, else a human-readable reason."""
        transition = next(
            (t for t in self.transitions if t.matches(source, target)), None
        )
        if transition is None:
            return f"Transition from '{source}' to '{target}' is not allowed"
        for condition in transition.conditions:
            if not condition.holds(record):
                return (
                    f"Condition not met: {condition.field} "
                    f"{condition.operator} {condition.value!r}"
                )
        return None

    def transition_table(self) -> dict[str, list[str]]:
        """Expand to a {current_state: [allowed targets]} table.

        Wildcard transitions are added to every state's entry.
        """
        return {state.code: self.valid_targets(state.code) for state in self.states}


def _chain(*pairs: tuple[str, str]) -> tuple[StateTransition, ...]:
    return tuple(StateTransition(source=s, target=t) for s, t in pairs)


DEAL_STATE_MACHINE = StateMachineDefinition(
    entity_type="deal",
    state_field="stage",
    initial_state="lead",
    states=(
        StateInfo("lead", "Lead"),
        StateInfo("qualified", "Qualified"),
        StateInfo("proposal", "Proposal"),
        StateInfo("negotiation", "Negotiation"),
        StateInfo("closed_won", "Closed Won", is_final=True),
        StateInfo("closed_lost", "Closed Lost", is_final=True),
    ),
    transitions=_chain(
        ("lead", "qualified"),
        ("qualified", "proposal"),
        ("proposal", "negotiation"),
        ("negotiation", "closed_won"),
        (WILDCARD, "closed_lost"),
    ),
)

CONTRACT_STATE_MACHINE = StateMachineDefinition(
    entity_type="contract",
    state_field="status",
    initial_state="draft",
    states=(
        StateInfo("draft", "Draft"),
        StateInfo("pending_landlord", "Pending Landlord"),
        StateInfo("pending_tenant", "Pending Tenant"),
        StateInfo("active", "Active"),
        StateInfo("completed", "Completed", is_final=True),
        StateInfo("cancelled", "Cancelled", is_final=True),
    ),
    transitions=_chain(
        ("draft", "pending_landlord"),
        ("pending_landlord", "pending_tenant"),
        ("pending_tenant", "active"),
        ("active", "completed"),
        (WILDCARD, "cancelled"),
    ),
)

PROPERTY_STATE_MACHINE = StateMachineDefinition(
    entity_type="property",
    state_field="status",
    initial_state="draft",
    states=(
        StateInfo("draft", "Draft"),
        StateInfo("available", "Available"),
        StateInfo("reserved", "Reserved"),
        StateInfo("rented", "Rented"),
        StateInfo("sold", "Sold", is_final=True),
        StateInfo("off_market", "Off Market"),
    ),
    transitions=_chain(
        ("draft", "available"),
        ("available", "reserved"),
        ("reserved", "rented"),
        ("reserved", "sold"),
        ("rented", "available"),
        (WILDCARD, "off_market"),
        ("off_market", "available"),
    ),
)

PRESETS: dict[str, StateMachineDefinition] = {
    m.entity_type: m
    for m in (DEAL_STATE_MACHINE, CONTRACT_STATE_MACHINE, PROPERTY_STATE_MACHINE)
}


def get_preset(name: str) -> StateMachineDefinition | None:
    """Return the preset state machine for an entity type, or None."""
    return PRESETS.get(name)
