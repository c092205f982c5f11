"""Time-of-day traffic bands."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ...models.domain import TrafficCondition

DURATION_MULTIPLIERS: dict[TrafficCondition, float] = {
    TrafficCondition.HEAVY: 1.2,
    TrafficCondition.MODERATE: 1.0,
    TrafficCondition.LIGHT: 0.85,
}


def _local_time(timestamp: datetime, timezone_name: Optional[str]) -> datetime:
    if timestamp.tzinfo is None or not timezone_name:
        return timestamp
    return timestamp.astimezone(ZoneInfo(timezone_name))


def classify_traffic(timestamp: datetime, timezone_name: Optional[str] = None) -> TrafficCondition:
    """Map a wall-clock time to a traffic band.

    Naive timestamps are taken as local wall-clock time. Aware timestamps are
    converted to ``timezone_name`` first when one is given.
    """

    local = _local_time(timestamp, timezone_name)
    hour = local.hour

    if local.weekday() >= 5:
        if 9 <= hour <= 17:
            return TrafficCondition.MODERATE
        return TrafficCondition.LIGHT

    if 7 <= hour <= 9 or 16 <= hour <= 18:
        return TrafficCondition.HEAVY
    if 10 <= hour <= 15 or 19 <= hour <= 20:
        return TrafficCondition.MODERATE
    return TrafficCondition.LIGHT


def current_traffic_condition(timezone_name: Optional[str] = None) -> TrafficCondition:
    now = datetime.now(ZoneInfo(timezone_name)) if timezone_name else datetime.now()
    return classify_traffic(now)


def traffic_duration_multiplier(condition: TrafficCondition) -> float:
    return DURATION_MULTIPLIERS[condition]
