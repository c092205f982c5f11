"""Cylinder load simulation along an ordered stop list."""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import CapacityStatus, LoadProfile, Stop

logger = logging.getLogger(__name__)


def _count(value: int | None) -> int:
    if not value or value < 0:
        return 0
    return int(value)


def simulate_load(
    stops: Sequence[Stop],
    *,
    full_weight_kg: float,
    empty_weight_kg: float,
) -> LoadProfile:
    """Walk the stops in order and track the cylinders on board.

    The vehicle leaves with nothing on board. A depot loads its full
    inventory and takes back every empty carried; customers and distribution
    points receive at most the fulls currently carried and hand over their
    empties. The reported maximum is the peak over the intermediate stops:
    the start (nothing travelled yet) and the end (already unloaded) do not
    count.
    """

    full_on_board = 0
    empty_on_board = 0
    weights: list[float] = []
    fulls: list[int] = []
    empties: list[int] = []

    for stop in stops:
        if stop.is_depot:
            full_on_board += _count(stop.full_cylinders)
            empty_on_board = 0
        else:
            delivered = min(full_on_board, _count(stop.full_cylinders))
            full_on_board -= delivered
            empty_on_board += _count(stop.empty_cylinders)

        fulls.append(full_on_board)
        empties.append(empty_on_board)
        weights.append(full_on_board * full_weight_kg + empty_on_board * empty_weight_kg)

    inner = weights[1:-1]
    max_weight = max(inner) if inner else 0.0
    logger.debug("Simulated load over %d stops, peak %.1f kg", len(stops), max_weight)

    return LoadProfile(
        max_weight=max(0.0, max_weight),
        per_stop_weight=weights,
        full_on_board=fulls,
        empty_on_board=empties,
    )


def check_capacity(max_weight: float, *, max_cylinders: int, full_weight_kg: float) -> CapacityStatus:
    """Compare a peak load against the vehicle's rated cylinder capacity."""

    max_allowed = max_cylinders * full_weight_kg
    utilization = (max_weight / max_allowed) * 100 if max_allowed > 0 else 0.0
    overweight = max_weight > max_allowed

    if overweight:
        level = "overweight"
    elif utilization > 90:
        level = "critical"
    elif utilization > 70:
        level = "elevated"
    else:
        level = "ok"

    return CapacityStatus(
        max_allowed_weight=max_allowed,
        utilization_percent=round(utilization, 2),
        overweight=overweight,
        level=level,
    )
