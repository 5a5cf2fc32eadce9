"""Geofence node: containment and distance against a circular fence."""

from __future__ import annotations

from typing import Any

from automation.application.services.scoring import coerce_float, haversine_km
from automation.application.use_cases.graphs.handlers.base import BaseNodeHandler
from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.domain.entities.graph import NodeInstance
from automation.domain.exceptions import ConfigurationException, InputException


def _coordinate(doc: dict[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = coerce_float(doc.get(key))
        if value is not None:
            return value
    return None


class GeofenceHandler(BaseNodeHandler):
    """Center from config latitude/longitude or inputs center_lat/center_lng.

    Single-point mode reads inputs latitude|lat and longitude|lng; batch
    mode reads inputs points. A point on the boundary is inside.
    """

    def __init__(self, default_radius_km: float = 5.0) -> None:
        self.default_radius_km = default_radius_km

    async def execute(
        self,
        node: NodeInstance,
        inputs: dict[str, Any],
        context: ExecutionContext,
    ) -> dict[str, Any]:
        center_lat = coerce_float(node.config.get("latitude"))
        if center_lat is None:
            center_lat = coerce_float(inputs.get("center_lat"))
        center_lng = coerce_float(node.config.get("longitude"))
        if center_lng is None:
            center_lng = coerce_float(inputs.get("center_lng"))
        if center_lat is None:
            raise ConfigurationException("Missing center latitude", key="latitude")
        if center_lng is None:
            raise ConfigurationException("Missing center longitude", key="longitude")
        radius_km = coerce_float(node.config.get("radius_km"))
        if radius_km is None:
            radius_km = coerce_float(inputs.get("radius"))
        if radius_km is None:
            radius_km = self.default_radius_km

        lat = _coordinate(inputs, "latitude", "lat")
        lng = _coordinate(inputs, "longitude", "lng")
        if lat is not None and lng is not None:
            distance = haversine_km(center_lat, center_lng, lat, lng)
            return {
                "is_inside": distance <= radius_km,
                "distance_km": distance,
                "center": {"lat": center_lat, "lng": center_lng},
                "point": {"lat": lat, "lng": lng},
                "radius_km": radius_km,
            }

        points = inputs.get("points")
        if isinstance(points, list):
            results: list[dict[str, Any]] = []
            for point in points:
                point = point if isinstance(point, dict) else {}
                p_lat = _coordinate(point, "latitude", "lat")
                p_lng = _coordinate(point, "longitude", "lng")
                if p_lat is None or p_lng is None:
                    results.append({"id": point.get("id"), "error": "Missing coordinates"})
                    continue
                distance = haversine_km(center_lat, center_lng, p_lat, p_lng)
                results.append(
                    {
                        "id": point.get("id"),
                        "is_inside": distance <= radius_km,
                        "distance_km": distance,
                    }
                )
            return {
                "results": results,
                "inside_count": sum(1 for r in results if r.get("is_inside") is True),
                "total": len(points),
            }

        raise InputException("No coordinates provided")
