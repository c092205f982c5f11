"""Load-dependent fuel consumption and cost."""

from __future__ import annotations

import math


def fuel_consumption_liters(
    distance_km: float,
    weight_kg: float,
    *,
    base_rate: float,
    load_factor: float,
) -> float:
    """Liters burnt over ``distance_km`` while carrying ``weight_kg``.

    ``base_rate`` is the unloaded consumption in L/100km; every 100 kg carried
    adds ``load_factor`` of that baseline. A missing or non-positive weight
    yields the unloaded consumption.
    """

    if distance_km < 0:
        raise ValueError(f"Distance must not be negative (got {distance_km}).")
    if weight_kg is None or not math.isfinite(weight_kg) or weight_kg <= 0:
        weight_factor = 1.0
    else:
        weight_factor = 1 + (weight_kg / 100) * load_factor
    return distance_km * base_rate * weight_factor / 100


def fuel_cost(liters: float, price_per_liter: float) -> float:
    if price_per_liter < 0:
        raise ValueError(f"Fuel price must not be negative (got {price_per_liter}).")
    return liters * price_per_liter
