"""Matching node: ranks candidates against a requirement document."""

from __future__ import annotations

from typing import Any

from automation.application.services.scoring import (
    MatchRequirement,
    ScoringWeights,
    coerce_float,
    rank_candidates,
)
from automation.application.use_cases.graphs.handlers.base import (
    BaseNodeHandler,
    record_input,
)
from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.domain.entities.graph import NodeInstance
from automation.domain.exceptions import InputException


class MatchingHandler(BaseNodeHandler):
    """Inputs: `lead` (or `record`) and `properties` (or `candidates`).

    Candidates fall back to config.properties. Weights come from
    config.*_weight; threshold and limit from config or the defaults.
    """

    def __init__(
        self,
        threshold: float = 0.5,
        limit: int = 10,
        default_radius_km: float = 10.0,
    ) -> None:
        self.threshold = threshold
        self.limit = limit
        self.default_radius_km = default_radius_km

    async def execute(
        self,
        node: NodeInstance,
        inputs: dict[str, Any],
        context: ExecutionContext,
    ) -> dict[str, Any]:
        lead = record_input(inputs, context, "lead", "record")
        candidates = inputs.get("properties", inputs.get("candidates"))
        if candidates is None:
            candidates = node.config.get("properties", [])
        if not isinstance(candidates, list):
            raise InputException(f"Node {node.id} (matching): candidates must be a list")
        threshold = coerce_float(node.config.get("threshold"))
        limit = coerce_float(node.config.get("limit"))
        matches = rank_candidates(
            MatchRequirement.from_document(lead, self.default_radius_km),
            candidates,
            weights=ScoringWeights.from_config(node.config),
            threshold=self.threshold if threshold is None else threshold,
            limit=self.limit if limit is None else int(limit),
        )
        return {
            "matches": [m.to_dict() for m in matches],
            "total_matched": len(matches),
            "lead_id": lead.get("id"),
        }
