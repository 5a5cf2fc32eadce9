"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from automation.shared.enums import (
    ActionType,
    AssignmentStrategy,
    ExecutionStatus,
    FailurePolicy,
    StepStatus,
    TriggerType,
)
from automation.shared.utils import generate_cuid, utc_now

__all__ = [
    "ActionType",
    "AssignmentStrategy",
    "ExecutionStatus",
    "FailurePolicy",
    "StepStatus",
    "TriggerType",
    "generate_cuid",
    "utc_now",
]
