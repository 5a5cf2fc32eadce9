"""Condition evaluation and trigger predicates.

evaluate_condition() compares one record field against a value with a
fixed operator set. trigger_applies() decides whether a workflow trigger
holds for a change event.
"""

from __future__ import annotations

from typing import Any

from automation.application.services.scoring import coerce_float
from automation.shared.enums import TriggerType
from automation.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_MISSING = object()

EQUALS = frozenset({"equals", "eq", "=="})
NOT_EQUALS = frozenset({"not_equals", "neq", "!="})
GREATER = frozenset({"greater_than", "gt", ">"})
LESS = frozenset({"less_than", "lt", "<"})
GREATER_EQUAL = frozenset({"greater_than_or_equal", "gte", ">="})
LESS_EQUAL = frozenset({"less_than_or_equal", "lte", "<="})
IS_NULL = frozenset({"is_null", "null"})
IS_NOT_NULL = frozenset({"is_not_null", "not_null"})


def values_equal(a: Any, b: Any) -> bool:
    """JSON-style equality: booleans never equal numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    return a == b


def _contains(items: list[Any], value: Any) -> bool:
    return any(values_equal(item, value) for item in items)


def _compare_numeric(a: Any, b: Any, op: str) -> bool:
    left, right = coerce_float(a), coerce_float(b)
    if left is None or right is None:
        return False
    if op in GREATER:
        return left > right
    if op in LESS:
        return left < right
    if op in GREATER_EQUAL:
        return left >= right
    return left <= right


def evaluate_condition(
    field: str,
    operator: str,
    value: Any,
    record: dict[str, Any] | None,
    old_record: dict[str, Any] | None = None,
) -> bool:
    """Evaluate record[field] <operator> value.

    Change operators (changed_to, changed_from, changed) read the prior
    value from old_record; a missing prior value means the record is new.
    Unknown operators evaluate to False.
    """
    current = (record or {}).get(field)
    old: Any = _MISSING
    if old_record is not None and field in old_record:
        old = old_record[field]
    op = (operator or "equals").strip().lower()

    if op in EQUALS:
        return values_equal(current, value)
    if op in NOT_EQUALS:
        return not values_equal(current, value)
    if op in GREATER or op in LESS or op in GREATER_EQUAL or op in LESS_EQUAL:
        return _compare_numeric(current, value, op)
    if op == "changed_to":
        if old is _MISSING:
            return values_equal(current, value)
        return not values_equal(old, value) and values_equal(current, value)
    if op == "changed_from":
        if old is _MISSING:
            return False
        return values_equal(old, value) and not values_equal(current, value)
    if op == "changed":
        if old is _MISSING:
            return True
        return not values_equal(old, current)
    if op in IS_NULL:
        return current is None
    if op in IS_NOT_NULL:
        return current is not None
    if op in ("contains", "starts_with", "ends_with"):
        if not isinstance(current, str):
            return False
        needle = value if isinstance(value, str) else ""
        if op == "contains":
            return needle in current
        if op == "starts_with":
            return current.startswith(needle)
        return current.endswith(needle)
    if op == "in":
        return isinstance(value, list) and _contains(value, current)
    if op == "not_in":
        return not isinstance(value, list) or not _contains(value, current)

    logger.warning("Unknown condition operator '%s' on field '%s'", operator, field)
    return False


def trigger_applies(
    trigger_type: str,
    trigger_config: dict[str, Any] | None,
    old_values: dict[str, Any] | None,
    new_values: dict[str, Any],
) -> bool:
    """Return whether a workflow's trigger predicate holds for a change event.

    - record_created: holds iff there is no prior snapshot.
    - field_changed: edge-triggered; new value equals `to` and the prior
      value did not. Without `to` the trigger always holds.
    - anything else: holds unconditionally.
    """
    config = trigger_config or {}
    if trigger_type == TriggerType.RECORD_CREATED.value:
        return old_values is None
    if trigger_type == TriggerType.FIELD_CHANGED.value and "to" in config:
        field = str(config.get("field") or "")
        target = config["to"]
        new_value = new_values.get(field)
        old_value = (old_values or {}).get(field)
        return values_equal(new_value, target) and not values_equal(old_value, target)
    return True
