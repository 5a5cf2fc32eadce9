"""Trigger matching: which active workflow definitions apply to a change event."""

from __future__ import annotations

from typing import Any

from automation.application.interfaces.repositories import (
    IWorkflowDefinitionRepository,
)
from automation.application.services.conditions import trigger_applies
from automation.domain.entities.workflow import WorkflowDefinitionEntity
from automation.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class TriggerMatcher:
    """Loads candidate workflows and filters them by trigger predicate.

    Repository errors propagate to the caller.
    """

    def __init__(self, workflow_repo: IWorkflowDefinitionRepository) -> None:
        self.workflow_repo = workflow_repo

    async def find_matching(
        self,
        tenant_id: str,
        trigger_type: str,
        entity_type: str,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any],
    ) -> list[WorkflowDefinitionEntity]:
        candidates = await self.workflow_repo.get_active_by_trigger(
            tenant_id, trigger_type, entity_type
        )
        matched = [
            wf
            for wf in candidates
            if wf.can_trigger_on(trigger_type, entity_type)
            and trigger_applies(wf.trigger_type, wf.trigger_config, old_values, new_values)
        ]
        logger.debug(
            "Trigger %s on %s matched %d of %d workflows (tenant_id=%s)",
            trigger_type,
            entity_type,
            len(matched),
            len(candidates),
            tenant_id,
        )
        return matched
