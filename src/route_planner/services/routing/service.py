"""Routing orchestration service."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ...config import Settings, settings as default_settings
from ...models.domain import ExternalRouteData, OptimizationParams, RouteMetrics, Segment, Stop
from ...schemas.routing import (
    CapacityModel,
    ExternalRouteModel,
    OptimizationParamsModel,
    RouteMetricsModel,
    RoutePlanRequest,
    RoutePlanResponse,
    SegmentModel,
    SequenceRequest,
    SequenceResponse,
    StopModel,
)
from ..load.simulator import simulate_load
from ..outputs.routing_formatter import format_duration
from .distance import has_valid_coordinates
from .metrics import aggregate_route_metrics
from .osrm_client import OSRMRouteClient, RoutingServiceError
from .sequencer import reorder_stops

logger = logging.getLogger(__name__)


def _stop_from_model(model: StopModel) -> Stop:
    return Stop(
        stop_id=model.id,
        kind=model.kind,
        latitude=model.latitude,
        longitude=model.longitude,
        full_cylinders=max(0, model.full_cylinders),
        empty_cylinders=max(0, model.empty_cylinders),
        name=model.name,
    )


def _stop_to_model(stop: Stop) -> StopModel:
    return StopModel(
        id=stop.stop_id,
        kind=stop.kind,
        name=stop.name,
        latitude=stop.latitude,
        longitude=stop.longitude,
        full_cylinders=stop.full_cylinders,
        empty_cylinders=stop.empty_cylinders,
    )


def _params_from_model(model: OptimizationParamsModel) -> OptimizationParams:
    return OptimizationParams(
        prioritize_fuel=model.prioritize_fuel,
        avoid_traffic=model.avoid_traffic,
        use_real_time_data=model.use_real_time_data,
        optimize_for_distance=model.optimize_for_distance,
    )


def _external_from_model(model: ExternalRouteModel) -> ExternalRouteData:
    return ExternalRouteData(
        distance=model.distance,
        duration=model.duration,
        waypoint_data=[Segment(distance=s.distance, duration=s.duration) for s in model.waypoint_data],
        traffic_conditions=model.traffic_conditions,
    )


def _metrics_to_model(metrics: RouteMetrics) -> RouteMetricsModel:
    return RouteMetricsModel(
        distance=metrics.distance,
        duration=metrics.duration,
        duration_label=format_duration(metrics.duration),
        fuel_consumption=metrics.fuel_consumption,
        fuel_cost=metrics.fuel_cost,
        maintenance_cost=metrics.maintenance_cost,
        total_cost=metrics.total_cost,
        traffic_conditions=metrics.traffic_conditions,
        total_weight=metrics.total_weight,
        using_real_time_data=metrics.using_real_time_data,
        capacity=CapacityModel(
            max_allowed_weight=metrics.capacity.max_allowed_weight,
            utilization_percent=metrics.capacity.utilization_percent,
            overweight=metrics.capacity.overweight,
            level=metrics.capacity.level,
        ),
        waypoint_data=[SegmentModel(distance=s.distance, duration=s.duration) for s in metrics.waypoint_data],
    )


def optimize_sequence(stops: Sequence[Stop], params: OptimizationParams) -> list[Stop]:
    """Reorder the middle of a full route, keeping its first and last stop in place."""
    if len(stops) < 4:
        return list(stops)
    start, middle, end = stops[0], stops[1:-1], stops[-1]
    return [start, *reorder_stops(start, middle, end, params), end]


def fetch_external_route(
    stops: Sequence[Stop],
    *,
    now: Optional[datetime] = None,
    config: Optional[Settings] = None,
) -> Optional[ExternalRouteData]:
    """Ask the configured routing service for the route, or return None.

    Service failures are not fatal: the caller falls back to local estimates.
    """
    config = config or default_settings
    if not config.routing_base_url:
        return None

    missing = [stop.stop_id for stop in stops if not has_valid_coordinates(stop)]
    if missing:
        logger.warning(f"Stops without coordinates ({', '.join(missing)}); using local estimates")
        return None
    if len(stops) < 2:
        return None

    coordinates = [(stop.latitude, stop.longitude) for stop in stops]

    try:
        client = OSRMRouteClient(config=config)
        return client.route(coordinates, now=now)
    except (RoutingServiceError, ValueError) as exc:
        logger.warning(f"External routing failed, falling back to local estimates: {exc}")
        return None


def sequence_stops(payload: SequenceRequest) -> SequenceResponse:
    stops = [_stop_from_model(model) for model in payload.stops]
    ordered = optimize_sequence(stops, _params_from_model(payload.params))
    changed = [stop.stop_id for stop in ordered] != [stop.stop_id for stop in stops]
    return SequenceResponse(stops=[_stop_to_model(stop) for stop in ordered], changed=changed)


def plan_route(payload: RoutePlanRequest, *, config: Optional[Settings] = None) -> RoutePlanResponse:
    """Optionally reorder the stops, then compute the metrics of the resulting route."""
    config = config or default_settings
    fuel_price = payload.fuel_price_per_liter
    if fuel_price is None:
        fuel_price = config.fuel_price_per_liter
    if fuel_price < 0:
        raise ValueError(f"Fuel price must not be negative (got {fuel_price}).")

    params = _params_from_model(payload.params)
    original = [_stop_from_model(model) for model in payload.stops]
    # Caller-supplied route data describes the stops in the order given.
    reorder = payload.optimize_order and payload.external_route is None
    if payload.optimize_order and not reorder:
        logger.info("Route data supplied with the request; keeping the given stop order")
    ordered = optimize_sequence(original, params) if reorder else list(original)
    now = payload.departure_time

    if payload.external_route is not None:
        external = _external_from_model(payload.external_route)
        source = "caller"
    elif params.use_real_time_data:
        external = fetch_external_route(ordered, now=now, config=config)
        source = "osrm" if external is not None else "local"
    else:
        external = None
        source = "local"
    if external is not None and external.distance <= 0:
        source = "local"

    metrics = aggregate_route_metrics(ordered, params, fuel_price, external, now=now, config=config)

    metadata: dict = {
        "source": source,
        "stop_count": len(ordered),
        "original_order": [stop.stop_id for stop in original],
        "optimized_order": [stop.stop_id for stop in ordered],
        "reordered": [stop.stop_id for stop in ordered] != [stop.stop_id for stop in original],
    }
    if metadata["reordered"]:
        # Compare both orders on the local estimate so the savings are like for like.
        naive = aggregate_route_metrics(original, params, fuel_price, now=now, config=config)
        optimized = aggregate_route_metrics(ordered, params, fuel_price, now=now, config=config)
        metadata["savings"] = {
            "distance_km": round(naive.distance - optimized.distance, 2),
            "duration_min": round(naive.duration - optimized.duration, 2),
            "total_cost": round(naive.total_cost - optimized.total_cost, 2),
        }

    load = simulate_load(
        ordered,
        full_weight_kg=config.full_cylinder_weight_kg,
        empty_weight_kg=config.empty_cylinder_weight_kg,
    )
    logger.info(
        f"Planned route of {len(ordered)} stops from {source} data: "
        f"{metrics.distance} km, {metrics.duration} min, cost {metrics.total_cost}"
    )

    return RoutePlanResponse(
        stops=[_stop_to_model(stop) for stop in ordered],
        stop_weights=[round(weight, 2) for weight in load.per_stop_weight],
        metrics=_metrics_to_model(metrics),
        metadata=metadata,
    )
