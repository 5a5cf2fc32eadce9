"""Legacy trigger-action workflows: matching, context, actions and runner."""

from automation.application.use_cases.workflows.actions import (
    FAILURE_POLICY,
    ActionDispatcher,
)
from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.application.use_cases.workflows.run_triggered_workflows import (
    TriggeredWorkflowRunner,
)
from automation.application.use_cases.workflows.trigger_matcher import TriggerMatcher

__all__ = [
    "FAILURE_POLICY",
    "ActionDispatcher",
    "ExecutionContext",
    "TriggerMatcher",
    "TriggeredWorkflowRunner",
]
