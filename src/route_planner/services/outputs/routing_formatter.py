"""Serializers for routing outputs."""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...schemas.routing import RoutePlanResponse


def format_duration(minutes: float) -> str:
    total = int(round(minutes))
    if total < 60:
        return f"{total} min"
    hours, remainder = divmod(total, 60)
    if remainder == 0:
        return f"{hours}h"
    return f"{hours}h {remainder}min"


def route_plan_to_json(plan: RoutePlanResponse) -> dict:
    return plan.model_dump(mode="json")


def route_plan_to_csv(plan: RoutePlanResponse) -> str:
    """One row per stop with the leg that reaches it and the load carried after it."""
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "stop_id",
        "kind",
        "name",
        "latitude",
        "longitude",
        "full_cylinders",
        "empty_cylinders",
        "segment_distance_km",
        "segment_duration_min",
        "load_weight_kg",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    segments = plan.metrics.waypoint_data
    for index, stop in enumerate(plan.stops):
        segment = segments[index] if index < len(segments) else None
        writer.writerow(
            {
                "sequence": index + 1,
                "stop_id": stop.id,
                "kind": stop.kind.value,
                "name": stop.name or "",
                "latitude": "" if stop.latitude is None else stop.latitude,
                "longitude": "" if stop.longitude is None else stop.longitude,
                "full_cylinders": stop.full_cylinders,
                "empty_cylinders": stop.empty_cylinders,
                "segment_distance_km": "" if segment is None else segment.distance,
                "segment_duration_min": "" if segment is None else segment.duration,
                "load_weight_kg": plan.stop_weights[index] if index < len(plan.stop_weights) else "",
            }
        )
    return buffer.getvalue()
