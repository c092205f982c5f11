"""Route metrics: distance, duration, load, fuel and cost for a stop sequence."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ...config import Settings, settings as default_settings
from ...models.domain import (
    ExternalRouteData,
    OptimizationParams,
    RouteMetrics,
    Segment,
    Stop,
    TrafficCondition,
)
from ..fuel.model import fuel_consumption_liters, fuel_cost
from ..load.simulator import check_capacity, simulate_load
from .distance import fallback_segment, has_valid_coordinates, segment_jitter, stop_distance_km
from .traffic import classify_traffic, current_traffic_condition, traffic_duration_multiplier

logger = logging.getLogger(__name__)

MIN_DISTANCE_KM = 0.1
MIN_DURATION_MINUTES = 1.0
OPTIMIZED_DISTANCE_MULTIPLIER = 0.9
UNOPTIMIZED_DISTANCE_MULTIPLIER = 1.05
FUEL_PRIORITY_MULTIPLIER = 0.9


def _segment_speed_kmh(index: int, config: Settings) -> float:
    return config.urban_speed_kmh if index % 2 == 0 else config.rural_speed_kmh


def estimate_segments(locations: Sequence[Stop], config: Settings) -> list[Segment]:
    """Estimate every leg of the route locally.

    The first entry is the zero segment of the starting stop. Legs alternate
    between urban and rural average speeds and include the dwell time at the
    stop being reached.
    """

    if not locations:
        return []

    segments = [Segment(distance=0.0, duration=0.0)]
    for index in range(len(locations) - 1):
        origin, destination = locations[index], locations[index + 1]
        if not (has_valid_coordinates(origin) and has_valid_coordinates(destination)):
            fallback = fallback_segment(index)
            logger.debug(
                "Using fallback segment %s -> %s (%.1f km)",
                origin.stop_id,
                destination.stop_id,
                fallback.distance,
            )
            segments.append(Segment(distance=fallback.distance, duration=fallback.duration + config.stop_dwell_minutes))
            continue

        distance = stop_distance_km(origin, destination) * segment_jitter(
            index, config.segment_jitter_magnitude, config.segment_jitter_seed
        )
        driving = distance / _segment_speed_kmh(index, config) * 60
        segments.append(Segment(distance=distance, duration=driving + config.stop_dwell_minutes))
    return segments


def _round_segment(segment: Segment) -> Segment:
    return Segment(distance=round(segment.distance, 2), duration=round(segment.duration, 2))


def aggregate_route_metrics(
    locations: Sequence[Stop],
    params: OptimizationParams,
    fuel_price_per_liter: float,
    external_route_data: Optional[ExternalRouteData] = None,
    *,
    now: Optional[datetime] = None,
    config: Optional[Settings] = None,
) -> RouteMetrics:
    """Compute the metrics of a stop sequence.

    External route data with a positive distance takes priority over the local
    estimate. ``now`` fixes the clock used for the traffic band; when omitted
    the current time in the configured time zone is used. Values are rounded
    to two decimals on the way out only.
    """

    config = config or default_settings
    if fuel_price_per_liter < 0:
        raise ValueError(f"Fuel price must not be negative (got {fuel_price_per_liter}).")

    use_external = external_route_data is not None and external_route_data.distance > 0
    if use_external:
        distance = external_route_data.distance
        duration = external_route_data.duration
        waypoint_data = list(external_route_data.waypoint_data)
        if waypoint_data and len(waypoint_data) == len(locations) - 1:
            # Engines report legs only; align with the local shape.
            waypoint_data.insert(0, Segment(distance=0.0, duration=0.0))
        elif len(waypoint_data) != len(locations):
            # One segment per stop, or the breakdown cannot be paired with the stops.
            if waypoint_data:
                logger.warning(
                    "External route has %d segments for %d stops; using the local breakdown",
                    len(waypoint_data),
                    len(locations),
                )
            waypoint_data = estimate_segments(locations, config)
        if duration <= 0:
            duration = distance / config.urban_speed_kmh * 60 + len(locations) * config.stop_dwell_minutes
    else:
        waypoint_data = estimate_segments(locations, config)
        distance = sum(segment.distance for segment in waypoint_data)
        duration = sum(segment.duration for segment in waypoint_data)

    distance *= OPTIMIZED_DISTANCE_MULTIPLIER if params.optimize_for_distance else UNOPTIMIZED_DISTANCE_MULTIPLIER

    if use_external:
        traffic = external_route_data.traffic_conditions
    elif params.use_real_time_data:
        if now is None:
            traffic = current_traffic_condition(config.traffic_timezone)
        else:
            traffic = classify_traffic(now, config.traffic_timezone)
        duration *= traffic_duration_multiplier(traffic)
    else:
        traffic = TrafficCondition.MODERATE

    distance = max(MIN_DISTANCE_KM, distance)
    duration = max(MIN_DURATION_MINUTES, duration, len(locations) * config.stop_dwell_minutes)

    load = simulate_load(
        locations,
        full_weight_kg=config.full_cylinder_weight_kg,
        empty_weight_kg=config.empty_cylinder_weight_kg,
    )
    consumption = fuel_consumption_liters(
        distance,
        load.max_weight,
        base_rate=config.base_fuel_consumption_rate,
        load_factor=config.fuel_load_factor,
    )
    if params.prioritize_fuel:
        consumption *= FUEL_PRIORITY_MULTIPLIER
    cost = fuel_cost(consumption, fuel_price_per_liter)
    maintenance = distance * config.maintenance_cost_per_km
    capacity = check_capacity(
        load.max_weight,
        max_cylinders=config.vehicle_max_cylinders,
        full_weight_kg=config.full_cylinder_weight_kg,
    )

    logger.debug(
        "Route metrics for %d stops: %.2f km, %.1f min, %.1f kg, traffic=%s, external=%s",
        len(locations),
        distance,
        duration,
        load.max_weight,
        traffic.value,
        use_external,
    )

    return RouteMetrics(
        distance=round(distance, 2),
        duration=round(duration, 2),
        fuel_consumption=round(consumption, 2),
        fuel_cost=round(cost, 2),
        maintenance_cost=round(maintenance, 2),
        total_cost=round(cost + maintenance, 2),
        traffic_conditions=traffic,
        total_weight=round(load.max_weight, 2),
        waypoint_data=[_round_segment(segment) for segment in waypoint_data],
        using_real_time_data=use_external,
        capacity=capacity,
    )
