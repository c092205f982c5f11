from datetime import datetime

import httpx
import pytest

from src.route_planner.config import settings
from src.route_planner.models.domain import TrafficCondition
from src.route_planner.services.routing.osrm_client import OSRMRouteClient, RoutingServiceError

MONDAY_RUSH_HOUR = datetime(2024, 3, 4, 8, 0)
COORDS = [(-33.9249, 18.4241), (-33.9321, 18.8602), (-33.7342, 18.9621)]


def _route_payload(legs):
    return {
        "code": "Ok",
        "routes": [
            {
                "distance": sum(leg["distance"] for leg in legs),
                "duration": sum(leg["duration"] for leg in legs),
                "legs": legs,
            }
        ],
    }


def _client(handler, **kwargs) -> OSRMRouteClient:
    return OSRMRouteClient(
        base_url="http://osrm.test/",
        max_retries=kwargs.pop("max_retries", 0),
        backoff_seconds=0.0,
        config=settings,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_route_converts_units_and_builds_waypoints():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        return httpx.Response(200, json=_route_payload([
            {"distance": 45000, "duration": 2700},
            {"distance": 28000, "duration": 1500},
        ]))

    result = _client(handler).route(COORDS, now=MONDAY_RUSH_HOUR)

    assert seen["path"] == "/route/v1/driving/18.4241,-33.9249;18.8602,-33.9321;18.9621,-33.7342"
    assert result.distance == pytest.approx(73.0)
    assert result.duration == pytest.approx(70.0)
    assert [segment.distance for segment in result.waypoint_data] == [45.0, 28.0]
    assert result.traffic_conditions is TrafficCondition.HEAVY


def test_typical_durations_drive_traffic_band():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_route_payload([
            {"distance": 10000, "duration": 900, "duration_typical": 700},
            {"distance": 10000, "duration": 600, "duration_typical": 600},
        ]))

    result = _client(handler).route(COORDS[:2], now=MONDAY_RUSH_HOUR)

    assert result.traffic_conditions is TrafficCondition.MODERATE


def test_retries_then_succeeds():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 1:
            return httpx.Response(503)
        return httpx.Response(200, json=_route_payload([{"distance": 1000, "duration": 120}]))

    result = _client(handler, max_retries=1).route(COORDS[:2], now=MONDAY_RUSH_HOUR)

    assert calls["count"] == 2
    assert result.distance == pytest.approx(1.0)


def test_http_failure_raises_routing_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "boom"})

    with pytest.raises(RoutingServiceError):
        _client(handler).route(COORDS[:2])


def test_no_route_raises_routing_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route", "routes": []})

    with pytest.raises(RoutingServiceError):
        _client(handler).route(COORDS[:2])


@pytest.mark.parametrize(
    "body",
    [
        {"code": "Ok", "routes": [{"distance": None, "duration": 60, "legs": []}]},
        {"code": "Ok", "routes": [{"distance": 1000, "duration": 60, "legs": ["bad"]}]},
        {"code": "Ok", "routes": ["bad"]},
        [{"code": "Ok"}],
    ],
)
def test_malformed_response_raises_routing_error(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    with pytest.raises(RoutingServiceError):
        _client(handler).route(COORDS[:2])


def test_network_failure_raises_routing_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RoutingServiceError):
        _client(handler).route(COORDS[:2])


def test_requires_base_url():
    config = settings.model_copy(update={"routing_base_url": None})

    with pytest.raises(ValueError):
        OSRMRouteClient(config=config)


def test_requires_two_coordinates():
    with pytest.raises(ValueError):
        _client(lambda request: httpx.Response(200)).route(COORDS[:1])
