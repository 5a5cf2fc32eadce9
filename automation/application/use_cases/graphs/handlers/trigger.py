"""Trigger node: emits the trigger payload."""

from __future__ import annotations

from typing import Any

from automation.application.use_cases.graphs.handlers.base import BaseNodeHandler
from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.domain.entities.graph import NodeInstance


class TriggerHandler(BaseNodeHandler):
    is_trigger = True

    async def execute(
        self,
        node: NodeInstance,
        inputs: dict[str, Any],
        context: ExecutionContext,
    ) -> dict[str, Any]:
        return context.trigger_document()
