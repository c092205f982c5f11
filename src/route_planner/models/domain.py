"""Domain models for stops, routes and computed route metrics."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class StopKind(str, Enum):
    """What a stop does to the cylinders carried by the vehicle."""

    DEPOT = "Depot"
    CUSTOMER = "Customer"
    DISTRIBUTION = "Distribution"


class TrafficCondition(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


@dataclass(slots=True)
class Stop:
    """A point visited by the vehicle.

    For a depot the cylinder counts are the inventory available to load; for
    customers and distribution points they are the fulls to deliver and the
    empties to collect.
    """

    stop_id: str
    kind: StopKind
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    full_cylinders: int = 0
    empty_cylinders: int = 0
    name: Optional[str] = None

    @property
    def is_depot(self) -> bool:
        return self.kind is StopKind.DEPOT


@dataclass(frozen=True, slots=True)
class OptimizationParams:
    prioritize_fuel: bool = True
    avoid_traffic: bool = True
    use_real_time_data: bool = True
    optimize_for_distance: bool = True


@dataclass(frozen=True, slots=True)
class Segment:
    distance: float
    duration: float


@dataclass(slots=True)
class LoadProfile:
    max_weight: float
    per_stop_weight: List[float]
    full_on_board: List[int]
    empty_on_board: List[int]


@dataclass(frozen=True, slots=True)
class CapacityStatus:
    max_allowed_weight: float
    utilization_percent: float
    overweight: bool
    level: str


@dataclass(slots=True)
class ExternalRouteData:
    """Route totals reported by an external routing engine."""

    distance: float
    duration: float
    waypoint_data: List[Segment] = field(default_factory=list)
    traffic_conditions: TrafficCondition = TrafficCondition.MODERATE


@dataclass(slots=True)
class RouteMetrics:
    distance: float
    duration: float
    fuel_consumption: float
    fuel_cost: float
    maintenance_cost: float
    total_cost: float
    traffic_conditions: TrafficCondition
    total_weight: float
    waypoint_data: List[Segment]
    using_real_time_data: bool
    capacity: CapacityStatus
