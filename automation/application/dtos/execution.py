"""DTOs for execution records (legacy workflow runs and graph runs)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from automation.shared.enums import ExecutionStatus, StepStatus


@dataclass
class NodeExecutionStep:
    """Audit record for one node in a graph run."""

    node_id: str
    node_type: str
    status: StepStatus = StepStatus.PENDING
    output: dict[str, Any] | None = None
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: float | None = None


@dataclass
class WorkflowExecution:
    """Audit record for one graph run: overall status plus ordered steps."""

    id: str
    graph_id: str
    tenant_id: str
    status: ExecutionStatus = ExecutionStatus.PENDING
    steps: list[NodeExecutionStep] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None

    def get_step(self, node_id: str) -> NodeExecutionStep | None:
        """Return the step for node_id, or None."""
        for step in self.steps:
            if step.node_id == node_id:
                return step
        return None


@dataclass(frozen=True)
class ActionOutcome:
    """One entry of a legacy workflow's per-action log."""

    action_id: str
    action_type: str
    status: StepStatus
    output: dict[str, Any] | None = None
    error: str | None = None

    def to_log_entry(self) -> dict[str, Any]:
        """Serialize for the execution_log column."""
        entry: dict[str, Any] = {
            "action_id": self.action_id,
            "action": self.action_type,
            "status": self.status.value,
        }
        if self.output:
            entry["output"] = self.output
        if self.error:
            entry["error"] = self.error
        return entry


@dataclass
class WorkflowRunResult:
    """Result of running one matched legacy workflow."""

    workflow_id: str
    workflow_name: str
    tenant_id: str
    entity_type: str
    entity_id: str | None
    status: ExecutionStatus = ExecutionStatus.RUNNING
    action_log: list[ActionOutcome] = field(default_factory=list)
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def actions_executed(self) -> int:
        return sum(1 for o in self.action_log if o.status == StepStatus.COMPLETED)

    @property
    def actions_failed(self) -> int:
        return sum(1 for o in self.action_log if o.status == StepStatus.FAILED)
