"""Shared enumerations for the automation engine.

Cross-cutting enums used by application and infrastructure (trigger types,
execution and step status, action failure policy).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TriggerType(_ValuesMixin, str, Enum):
    """Event class that causes workflow matching to run."""

    FIELD_CHANGED = "field_changed"
    RECORD_CREATED = "record_created"
    FORM_SUBMITTED = "form_submitted"


class ExecutionStatus(_ValuesMixin, str, Enum):
    """Workflow / graph run lifecycle status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StepStatus(_ValuesMixin, str, Enum):
    """Per-node (or per-action) execution status.

    SKIPPED marks a node that was not run (disabled, or reachable only
    through a non-fired or failed port). It is never a failure.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class FailurePolicy(_ValuesMixin, str, Enum):
    """How an action failure affects the surrounding run."""

    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


class ActionType(_ValuesMixin, str, Enum):
    """Legacy workflow action types."""

    UPDATE_RECORD = "update_record"
    CREATE_RECORD = "create_record"
    LOG_ACTIVITY = "log_activity"
    SEND_NOTIFICATION = "send_notification"
    UPSERT_RECORD = "upsert_record"
    ASSIGN_AGENT = "assign_agent"


class AssignmentStrategy(_ValuesMixin, str, Enum):
    """Strategy tags accepted by assign_agent (all placeholders)."""

    ROUND_ROBIN = "round_robin"
    LOAD_BALANCED = "load_balanced"
    MANUAL = "manual"
