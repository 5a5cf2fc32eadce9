"""Application services: pure scoring, templating, conditions and state machines."""

from automation.application.services.conditions import (
    evaluate_condition,
    trigger_applies,
)
from automation.application.services.scoring import (
    MatchRequirement,
    ScoredCandidate,
    ScoringWeights,
    haversine_km,
    rank_candidates,
)
from automation.application.services.state_machines import (
    StateMachineDefinition,
    get_preset,
)
from automation.application.services.template_resolver import TemplateResolver

__all__ = [
    "MatchRequirement",
    "ScoredCandidate",
    "ScoringWeights",
    "StateMachineDefinition",
    "TemplateResolver",
    "evaluate_condition",
    "get_preset",
    "haversine_km",
    "rank_candidates",
    "trigger_applies",
]
