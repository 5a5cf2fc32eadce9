"""Weighted multi-criteria scoring for requirement/candidate matching.

Pure functions (no I/O). Composite score is the weighted sum of budget,
location, type, size and amenity component scores, each in [0, 1].
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from automation.domain.exceptions import ConfigurationException

EARTH_RADIUS_KM = 6371.0

# No per-amenity comparison; every candidate gets the same partial credit.
AMENITY_SCORE = 0.8

UNDER_BUDGET_SCORE = 0.8
TEXT_LOCATION_MISS_SCORE = 0.3


def coerce_float(value: Any) -> float | None:
    """Coerce a JSON number or numeric string to float; bools are not numbers."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _first(doc: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if doc.get(key) is not None:
            return doc[key]
    return None


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres (Haversine, Earth radius 6371 km)."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(a))


def budget_score(price: float, budget_min: float, budget_max: float) -> float:
    """1.0 inside [min, max], 0.8 under min, linear decay over max."""
    if budget_min <= price <= budget_max:
        return 1.0
    if price < budget_min:
        return UNDER_BUDGET_SCORE
    if budget_max <= 0:
        return 0.0
    over_percent = (price - budget_max) / budget_max
    return max(0.0, 1.0 - over_percent)


def type_score(candidate_type: str, requested_type: str) -> float:
    if not requested_type or candidate_type.lower() == requested_type.lower():
        return 1.0
    return 0.0


def size_score(bedrooms: int, min_bedrooms: int) -> float:
    if bedrooms >= min_bedrooms:
        return 1.0
    return bedrooms / max(min_bedrooms, 1)


@dataclass(frozen=True)
class ScoringWeights:
    """Component weights; each non-negative, total at most 1."""

    budget: float = 0.30
    location: float = 0.25
    property_type: float = 0.20
    size: float = 0.15
    amenity: float = 0.10

    def __post_init__(self) -> None:
        values = (self.budget, self.location, self.property_type, self.size, self.amenity)
        if any(v < 0 for v in values):
            raise ConfigurationException("Scoring weights must be non-negative")
        # Tolerate float noise from authored configs like 0.1 + 0.2 + ...
        if sum(values) > 1.0 + 1e-9:
            raise ConfigurationException("Scoring weights must sum to at most 1")

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ScoringWeights:
        """Read *_weight keys from a node config, falling back to defaults."""
        defaults = cls()

        def pick(key: str, default: float) -> float:
            value = coerce_float(config.get(key))
            return default if value is None else value

        return cls(
            budget=pick("budget_weight", defaults.budget),
            location=pick("location_weight", defaults.location),
            property_type=pick("type_weight", defaults.property_type),
            size=pick("size_weight", defaults.size),
            amenity=pick("amenity_weight", defaults.amenity),
        )


@dataclass(frozen=True)
class MatchRequirement:
    """What the requester is looking for."""

    budget_min: float = 0.0
    budget_max: float = math.inf
    property_type: str = ""
    min_bedrooms: int = 0
    preferred_location: str = ""
    latitude: float | None = None
    longitude: float | None = None
    radius_km: float = 10.0

    @classmethod
    def from_document(
        cls, doc: dict[str, Any] | None, default_radius_km: float = 10.0
    ) -> MatchRequirement:
        """Build from a lead/requirement document (accepts key aliases)."""
        doc = doc or {}
        budget_min = coerce_float(_first(doc, "budget_min", "min_budget"))
        budget_max = coerce_float(_first(doc, "budget_max", "max_budget"))
        min_bedrooms = coerce_float(_first(doc, "bedrooms_min", "min_bedrooms"))
        radius = coerce_float(_first(doc, "radius_km", "search_radius"))
        location = _first(doc, "preferred_location", "location")
        return cls(
            budget_min=0.0 if budget_min is None else budget_min,
            budget_max=math.inf if budget_max is None else budget_max,
            property_type=str(doc.get("property_type") or ""),
            min_bedrooms=0 if min_bedrooms is None else int(min_bedrooms),
            preferred_location=location if isinstance(location, str) else "",
            latitude=coerce_float(_first(doc, "latitude", "lat")),
            longitude=coerce_float(_first(doc, "longitude", "lng")),
            radius_km=default_radius_km if radius is None else radius,
        )


def location_score(requirement: MatchRequirement, candidate: dict[str, Any]) -> float:
    """Distance-based when both sides have coordinates, else text containment."""
    if requirement.latitude is not None and requirement.longitude is not None:
        lat = coerce_float(_first(candidate, "latitude", "lat"))
        lng = coerce_float(_first(candidate, "longitude", "lng"))
        if lat is not None and lng is not None:
            distance = haversine_km(requirement.latitude, requirement.longitude, lat, lng)
            if distance <= requirement.radius_km:
                return 1.0
            return min(1.0, requirement.radius_km / distance)
    if not requirement.preferred_location:
        return 1.0
    place = _first(candidate, "city", "location")
    place = place if isinstance(place, str) else ""
    if requirement.preferred_location.lower() in place.lower():
        return 1.0
    return TEXT_LOCATION_MISS_SCORE


@dataclass(frozen=True)
class ScoredCandidate:
    """One candidate with its composite score and component breakdown."""

    candidate_id: Any
    score: float
    breakdown: dict[str, float]
    candidate: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "property_id": self.candidate_id,
            "score": self.score,
            "score_percent": round(self.score * 100),
            "match_details": dict(self.breakdown),
            "property": self.candidate,
        }


def score_candidate(
    requirement: MatchRequirement,
    candidate: dict[str, Any],
    weights: ScoringWeights,
) -> ScoredCandidate:
    """Compute the weighted composite score for one candidate."""
    price = coerce_float(_first(candidate, "price", "asking_price")) or 0.0
    bedrooms = coerce_float(candidate.get("bedrooms"))
    candidate_type = candidate.get("property_type")
    breakdown = {
        "budget_score": budget_score(price, requirement.budget_min, requirement.budget_max),
        "type_score": type_score(
            candidate_type if isinstance(candidate_type, str) else "",
            requirement.property_type,
        ),
        "size_score": size_score(
            0 if bedrooms is None else int(bedrooms), requirement.min_bedrooms
        ),
        "location_score": location_score(requirement, candidate),
        "amenity_score": AMENITY_SCORE,
    }
    composite = (
        breakdown["budget_score"] * weights.budget
        + breakdown["type_score"] * weights.property_type
        + breakdown["size_score"] * weights.size
        + breakdown["location_score"] * weights.location
        + breakdown["amenity_score"] * weights.amenity
    )
    return ScoredCandidate(
        candidate_id=candidate.get("id"),
        score=composite,
        breakdown=breakdown,
        candidate=candidate,
    )


def rank_candidates(
    requirement: MatchRequirement,
    candidates: list[dict[str, Any]],
    weights: ScoringWeights | None = None,
    threshold: float = 0.5,
    limit: int = 10,
) -> list[ScoredCandidate]:
    """Score, drop those under threshold, sort descending and truncate.

    sorted() is stable, so equal scores keep their original order.
    """
    weights = weights or ScoringWeights()
    scored = [
        score_candidate(requirement, c, weights)
        for c in candidates
        if isinstance(c, dict)
    ]
    kept = [s for s in scored if s.score >= threshold]
    kept = sorted(kept, key=lambda s: s.score, reverse=True)
    return kept[: max(limit, 0)]
