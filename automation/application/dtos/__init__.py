"""Application DTOs (no ORM dependency)."""

from automation.application.dtos.execution import (
    ActionOutcome,
    NodeExecutionStep,
    WorkflowExecution,
    WorkflowRunResult,
)
from automation.application.dtos.trigger import TriggerPayload

__all__ = [
    "ActionOutcome",
    "NodeExecutionStep",
    "TriggerPayload",
    "WorkflowExecution",
    "WorkflowRunResult",
]
