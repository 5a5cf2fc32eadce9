"""Legacy trigger-action runner.

For each workflow matched by a change event, runs its actions in order
with a fresh ExecutionContext. A fail-fast action failure aborts the rest
of that workflow only; actions already applied are not rolled back and
sibling workflows still run. One audit entry is written per workflow.
"""

from __future__ import annotations

from typing import Any

from automation.application.dtos.execution import ActionOutcome, WorkflowRunResult
from automation.application.dtos.trigger import TriggerPayload
from automation.application.interfaces.repositories import IExecutionLogRepository
from automation.application.use_cases.workflows.actions import ActionDispatcher
from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.application.use_cases.workflows.trigger_matcher import TriggerMatcher
from automation.domain.entities.workflow import WorkflowDefinitionEntity
from automation.shared.enums import ExecutionStatus, StepStatus
from automation.shared.telemetry.logging import get_logger
from automation.shared.telemetry.tracing import add_span_attributes, traced
from automation.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class TriggeredWorkflowRunner:
    """Finds and runs legacy workflows for a change event."""

    def __init__(
        self,
        matcher: TriggerMatcher,
        dispatcher: ActionDispatcher,
        execution_log: IExecutionLogRepository | None = None,
    ) -> None:
        self.matcher = matcher
        self.dispatcher = dispatcher
        self.execution_log = execution_log

    @traced("automation.execute_triggered_workflows")
    async def execute_triggered_workflows(
        self,
        tenant_id: str,
        trigger_type: str,
        entity_type: str,
        entity_id: str | None,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any],
    ) -> list[str]:
        """Run every matching workflow and return the ids that completed.

        Raises when matching fails; per-workflow failures are recorded, not raised.
        """
        payload = TriggerPayload(
            tenant_id=tenant_id,
            trigger_type=trigger_type,
            entity_type=entity_type,
            entity_id=entity_id,
            old_values=old_values,
            new_values=new_values,
        )
        results = await self.run_triggered_workflows(payload)
        return [r.workflow_id for r in results if r.status == ExecutionStatus.COMPLETED]

    @traced("automation.run_triggered_workflows")
    async def run_triggered_workflows(
        self, payload: TriggerPayload
    ) -> list[WorkflowRunResult]:
        """Run every matching workflow and return one result per workflow."""
        workflows = await self.matcher.find_matching(
            payload.tenant_id,
            payload.trigger_type,
            payload.entity_type,
            payload.old_values,
            payload.new_values,
        )
        add_span_attributes(
            tenant_id=payload.tenant_id,
            trigger_type=payload.trigger_type,
            entity_type=payload.entity_type,
            matched_workflows=len(workflows),
        )
        results: list[WorkflowRunResult] = []
        for workflow in workflows:
            result = await self._run_workflow(workflow, payload)
            await self._record(result)
            results.append(result)
        return results

    async def _run_workflow(
        self, workflow: WorkflowDefinitionEntity, payload: TriggerPayload
    ) -> WorkflowRunResult:
        logger.info("Executing workflow: %s (%s)", workflow.name, workflow.id)
        context = ExecutionContext.from_trigger(payload)
        result = WorkflowRunResult(
            workflow_id=workflow.id,
            workflow_name=workflow.name,
            tenant_id=payload.tenant_id,
            entity_type=payload.entity_type,
            entity_id=payload.entity_id,
            started_at=utc_now(),
        )
        for action in workflow.actions:
            try:
                outcome = await self.dispatcher.dispatch(action, context)
            except Exception as e:
                result.action_log.append(
                    ActionOutcome(
                        action_id=action.id,
                        action_type=action.action_type,
                        status=StepStatus.FAILED,
                        error=str(e),
                    )
                )
                result.status = ExecutionStatus.FAILED
                result.error = f"{action.action_type} ({action.id}): {e}"
                logger.error("Workflow %s failed: %s", workflow.id, result.error)
                break
            result.action_log.append(outcome)
        else:
            result.status = ExecutionStatus.COMPLETED
            logger.info("Workflow %s completed successfully", workflow.id)
        result.completed_at = utc_now()
        return result

    async def _record(self, result: WorkflowRunResult) -> None:
        """Write the audit entry; a failed write never fails the run."""
        if self.execution_log is None:
            return
        try:
            await self.execution_log.record_workflow_run(result)
        except Exception:
            logger.exception(
                "Failed to record execution of workflow %s (tenant_id=%s)",
                result.workflow_id,
                result.tenant_id,
            )
