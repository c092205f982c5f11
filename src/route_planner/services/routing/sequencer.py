"""Greedy stop ordering between a fixed start and end.

The ordering is a nearest-neighbour walk over weighted scores. It is a fast
approximation and does not search for the globally shortest tour.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from ...models.domain import OptimizationParams, Stop
from .distance import has_valid_coordinates, stop_distance_km

logger = logging.getLogger(__name__)

MIN_LOCATION_FACTOR = 0.5
MAX_LOCATION_FACTOR = 1.5

LocationWeighting = Callable[[Stop], float]


def latitude_weighting(stop: Stop) -> float:
    """Penalise stops further from the equator, up to +0.1."""

    return abs(stop.latitude or 0.0) / 90 * 0.1


def location_factor(
    stop: Stop,
    prioritize_fuel: bool,
    weighting: LocationWeighting = latitude_weighting,
) -> float:
    """Score multiplier for a candidate stop.

    Stops holding many empties become more attractive. When fuel is
    prioritised ``weighting`` adds a per-stop penalty.
    """

    factor = 1.0
    if stop.empty_cylinders and stop.empty_cylinders > 0:
        factor -= (stop.empty_cylinders / 50) * 0.2
    if prioritize_fuel:
        factor += weighting(stop)
    return max(MIN_LOCATION_FACTOR, min(factor, MAX_LOCATION_FACTOR))


def traffic_factor(params: OptimizationParams) -> float:
    if not params.avoid_traffic:
        return 1.0
    return 0.7 if params.use_real_time_data else 0.85


def fuel_factor(params: OptimizationParams) -> float:
    return 0.7 if params.prioritize_fuel else 1.0


def reorder_stops(
    start: Stop,
    middle: Sequence[Stop],
    end: Stop,
    params: OptimizationParams,
    *,
    weighting: LocationWeighting = latitude_weighting,
) -> list[Stop]:
    """Return ``middle`` reordered by repeatedly visiting the best-scoring stop.

    ``start`` and ``end`` are never moved; ``end`` is accepted so callers pass
    the whole route, though the walk does not look ahead to it. Stops without
    usable coordinates cannot be scored and are appended after the ordered
    ones in their original order. The result is always a permutation of
    ``middle``.
    """

    if len(middle) <= 1:
        return list(middle)

    shared_factor = traffic_factor(params) * fuel_factor(params)
    unvisited = [stop for stop in middle if has_valid_coordinates(stop)]
    unplaced = [stop for stop in middle if not has_valid_coordinates(stop)]
    ordered: list[Stop] = []
    current = start

    while unvisited:
        if not has_valid_coordinates(current):
            logger.warning(
                "Stop %s has no usable coordinates; keeping %d stops in given order",
                current.stop_id,
                len(unvisited),
            )
            break

        best_index = -1
        best_score = float("inf")
        for index, candidate in enumerate(unvisited):
            score = (
                stop_distance_km(current, candidate)
                * location_factor(candidate, params.prioritize_fuel, weighting)
                * shared_factor
            )
            if score < best_score:
                best_score = score
                best_index = index

        if best_index == -1:
            break

        current = unvisited.pop(best_index)
        ordered.append(current)

    if unplaced:
        logger.debug("Appending %d stops without coordinates to the end of the sequence", len(unplaced))

    return ordered + unvisited + unplaced
