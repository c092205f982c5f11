"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import StopKind, TrafficCondition


class StopModel(BaseModel):
    id: str
    kind: StopKind
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    full_cylinders: int = 0
    empty_cylinders: int = 0


class OptimizationParamsModel(BaseModel):
    prioritize_fuel: bool = True
    avoid_traffic: bool = True
    use_real_time_data: bool = True
    optimize_for_distance: bool = True


class SegmentModel(BaseModel):
    distance: float = Field(..., ge=0, description="Segment distance in kilometres.")
    duration: float = Field(..., ge=0, description="Segment duration in minutes.")


class ExternalRouteModel(BaseModel):
    """Route totals computed by a mapping service on the caller's side."""

    distance: float = Field(..., ge=0)
    duration: float = Field(default=0.0, ge=0)
    waypoint_data: List[SegmentModel] = Field(default_factory=list)
    traffic_conditions: TrafficCondition = TrafficCondition.MODERATE


class RoutePlanRequest(BaseModel):
    stops: List[StopModel] = Field(..., description="Ordered stops; the first and last are fixed.")
    params: OptimizationParamsModel = Field(default_factory=OptimizationParamsModel)
    fuel_price_per_liter: Optional[float] = Field(
        default=None,
        description="Fuel price per liter. Uses the configured default when omitted.",
    )
    optimize_order: bool = Field(default=True, description="Reorder the middle stops before computing metrics. Ignored when external_route is supplied.")
    external_route: Optional[ExternalRouteModel] = Field(default=None, description="Route data for the stops in the given order.")
    departure_time: Optional[datetime] = Field(
        default=None,
        description="Clock used for the traffic band. Defaults to now.",
    )


class SequenceRequest(BaseModel):
    stops: List[StopModel]
    params: OptimizationParamsModel = Field(default_factory=OptimizationParamsModel)


class SequenceResponse(BaseModel):
    stops: List[StopModel]
    changed: bool


class CapacityModel(BaseModel):
    max_allowed_weight: float
    utilization_percent: float
    overweight: bool
    level: Literal["ok", "elevated", "critical", "overweight"]


class RouteMetricsModel(BaseModel):
    distance: float
    duration: float
    duration_label: str
    fuel_consumption: float
    fuel_cost: float
    maintenance_cost: float
    total_cost: float
    traffic_conditions: TrafficCondition
    total_weight: float
    using_real_time_data: bool
    capacity: CapacityModel
    waypoint_data: List[SegmentModel]


class RoutePlanResponse(BaseModel):
    stops: List[StopModel]
    stop_weights: List[float]
    metrics: RouteMetricsModel
    metadata: dict
