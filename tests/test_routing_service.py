from datetime import datetime

import pytest

from src.route_planner.config import settings
from src.route_planner.models.domain import ExternalRouteData, Segment, TrafficCondition
from src.route_planner.schemas.routing import RoutePlanRequest, SequenceRequest
from src.route_planner.services.routing import service as routing_service
from src.route_planner.services.routing.osrm_client import RoutingServiceError

MONDAY_RUSH_HOUR = datetime(2024, 3, 4, 8, 0)


def _stops() -> list[dict]:
    return [
        {"id": "DEPOT", "kind": "Depot", "latitude": 0.0, "longitude": 0.0, "full_cylinders": 40},
        {"id": "FAR", "kind": "Customer", "latitude": 0.0, "longitude": 0.3, "full_cylinders": 10, "empty_cylinders": 5},
        {"id": "NEAR", "kind": "Customer", "latitude": 0.0, "longitude": 0.1, "full_cylinders": 10, "empty_cylinders": 5},
        {"id": "MID", "kind": "Distribution", "latitude": 0.0, "longitude": 0.2, "full_cylinders": 10, "empty_cylinders": 5},
        {"id": "DEPOT_END", "kind": "Depot", "latitude": 0.0, "longitude": 0.0},
    ]


def _request(**overrides) -> RoutePlanRequest:
    payload = {
        "stops": _stops(),
        "params": {"use_real_time_data": False},
        "departure_time": MONDAY_RUSH_HOUR,
    }
    payload.update(overrides)
    return RoutePlanRequest(**payload)


def test_plan_route_reorders_middle_stops():
    response = routing_service.plan_route(_request(), config=settings)

    assert [stop.id for stop in response.stops] == ["DEPOT", "NEAR", "MID", "FAR", "DEPOT_END"]
    assert response.metadata["source"] == "local"
    assert response.metadata["reordered"] is True
    assert response.metadata["savings"]["distance_km"] > 0
    assert len(response.stop_weights) == 5
    assert response.metrics.duration_label


def test_plan_route_keeps_order_when_disabled():
    response = routing_service.plan_route(_request(optimize_order=False), config=settings)

    assert [stop.id for stop in response.stops] == [stop["id"] for stop in _stops()]
    assert response.metadata["reordered"] is False
    assert "savings" not in response.metadata


def test_plan_route_uses_default_fuel_price():
    config = settings.model_copy(update={"fuel_price_per_liter": 10.0})

    response = routing_service.plan_route(_request(), config=config)

    assert response.metrics.fuel_cost == pytest.approx(response.metrics.fuel_consumption * 10.0, abs=0.06)


def test_plan_route_rejects_negative_price():
    with pytest.raises(ValueError):
        routing_service.plan_route(_request(fuel_price_per_liter=-2.0), config=settings)


def test_external_route_used_when_available(monkeypatch):
    config = settings.model_copy(update={"routing_base_url": "http://osrm.test"})

    class DummyClient:
        def route(self, coordinates, now=None):
            assert len(coordinates) == 5
            return ExternalRouteData(
                distance=80.0,
                duration=120.0,
                waypoint_data=[Segment(20.0, 30.0)] * 4,
                traffic_conditions=TrafficCondition.LIGHT,
            )

    monkeypatch.setattr(routing_service, "OSRMRouteClient", lambda **kwargs: DummyClient())

    response = routing_service.plan_route(_request(params={"use_real_time_data": True}), config=config)

    assert response.metadata["source"] == "osrm"
    assert response.metrics.using_real_time_data is True
    assert response.metrics.distance == 72.0
    assert response.metrics.traffic_conditions is TrafficCondition.LIGHT


def test_external_failure_falls_back_to_local(monkeypatch, caplog):
    config = settings.model_copy(update={"routing_base_url": "http://osrm.test"})

    class FailingClient:
        def route(self, coordinates, now=None):
            raise RoutingServiceError("service unavailable")

    monkeypatch.setattr(routing_service, "OSRMRouteClient", lambda **kwargs: FailingClient())

    response = routing_service.plan_route(_request(params={"use_real_time_data": True}), config=config)

    assert response.metadata["source"] == "local"
    assert response.metrics.using_real_time_data is False
    assert response.metrics.traffic_conditions is TrafficCondition.HEAVY
    assert "falling back to local estimates" in caplog.text


def test_caller_supplied_route_data():
    request = _request(external_route={"distance": 30.0, "duration": 60.0, "traffic_conditions": "moderate"})

    response = routing_service.plan_route(request, config=settings)

    assert response.metadata["source"] == "caller"
    assert response.metrics.distance == 27.0


def test_sequence_stops_reports_change():
    response = routing_service.sequence_stops(SequenceRequest(stops=_stops()))

    assert [stop.id for stop in response.stops] == ["DEPOT", "NEAR", "MID", "FAR", "DEPOT_END"]
    assert response.changed is True


def test_short_routes_are_not_reordered():
    stops = _stops()[:3]

    response = routing_service.sequence_stops(SequenceRequest(stops=stops))

    assert [stop.id for stop in response.stops] == ["DEPOT", "FAR", "NEAR"]
    assert response.changed is False


def test_stops_without_coordinates_skip_external_routing(monkeypatch, caplog):
    config = settings.model_copy(update={"routing_base_url": "http://osrm.test"})
    stops = _stops()[:4]
    stops[2] = {"id": "NEAR", "kind": "Customer", "full_cylinders": 10, "empty_cylinders": 5}

    class UnexpectedClient:
        def route(self, coordinates, now=None):
            raise AssertionError("external routing should not be queried")

    monkeypatch.setattr(routing_service, "OSRMRouteClient", lambda **kwargs: UnexpectedClient())

    response = routing_service.plan_route(
        _request(stops=stops, params={"use_real_time_data": True}, optimize_order=False), config=config
    )

    assert response.metadata["source"] == "local"
    assert len(response.metrics.waypoint_data) == len(stops)
    assert "NEAR" in caplog.text


def test_malformed_engine_response_falls_back_to_local(monkeypatch):
    import httpx

    from src.route_planner.services.routing.osrm_client import OSRMRouteClient

    config = settings.model_copy(update={"routing_base_url": "http://osrm.test", "routing_max_retries": 0})

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": None, "duration": None, "legs": []}]})

    monkeypatch.setattr(
        routing_service,
        "OSRMRouteClient",
        lambda **kwargs: OSRMRouteClient(transport=httpx.MockTransport(handler), **kwargs),
    )

    response = routing_service.plan_route(_request(params={"use_real_time_data": True}), config=config)

    assert response.metadata["source"] == "local"
    assert response.metrics.using_real_time_data is False


def test_caller_route_data_keeps_given_order():
    legs = [{"distance": 0.0, "duration": 0.0}] + [{"distance": 10.0, "duration": 20.0}] * 4
    request = _request(external_route={"distance": 40.0, "duration": 80.0, "waypoint_data": legs})

    response = routing_service.plan_route(request, config=settings)

    assert [stop.id for stop in response.stops] == [stop["id"] for stop in _stops()]
    assert response.metadata["source"] == "caller"
    assert response.metadata["reordered"] is False
    assert [segment.distance for segment in response.metrics.waypoint_data] == [0.0, 10.0, 10.0, 10.0, 10.0]


def test_reordering_still_applies_without_caller_route_data():
    response = routing_service.plan_route(_request(optimize_order=True), config=settings)

    assert response.metadata["reordered"] is True
    assert response.metadata["source"] == "local"
