from datetime import datetime, timezone

import pytest

from src.route_planner.models.domain import TrafficCondition
from src.route_planner.services.routing.traffic import classify_traffic, traffic_duration_multiplier

# 2024-03-04 is a Monday, 2024-03-09 a Saturday.
MONDAY = (2024, 3, 4)
SATURDAY = (2024, 3, 9)


@pytest.mark.parametrize(
    ("hour", "expected"),
    [
        (6, TrafficCondition.LIGHT),
        (7, TrafficCondition.HEAVY),
        (8, TrafficCondition.HEAVY),
        (9, TrafficCondition.HEAVY),
        (12, TrafficCondition.MODERATE),
        (17, TrafficCondition.HEAVY),
        (19, TrafficCondition.MODERATE),
        (20, TrafficCondition.MODERATE),
        (22, TrafficCondition.LIGHT),
    ],
)
def test_weekday_bands(hour, expected):
    assert classify_traffic(datetime(*MONDAY, hour, 0)) is expected


@pytest.mark.parametrize(
    ("hour", "expected"),
    [(8, TrafficCondition.LIGHT), (9, TrafficCondition.MODERATE), (17, TrafficCondition.MODERATE), (18, TrafficCondition.LIGHT)],
)
def test_weekend_bands(hour, expected):
    assert classify_traffic(datetime(*SATURDAY, hour, 30)) is expected


def test_aware_timestamps_use_configured_zone():
    # 06:00 UTC is 08:00 in Johannesburg.
    timestamp = datetime(*MONDAY, 6, 0, tzinfo=timezone.utc)

    assert classify_traffic(timestamp, "Africa/Johannesburg") is TrafficCondition.HEAVY
    assert classify_traffic(timestamp) is TrafficCondition.LIGHT


def test_duration_multipliers():
    assert traffic_duration_multiplier(TrafficCondition.HEAVY) == 1.2
    assert traffic_duration_multiplier(TrafficCondition.MODERATE) == 1.0
    assert traffic_duration_multiplier(TrafficCondition.LIGHT) == 0.85
