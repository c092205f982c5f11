"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Sequence

import httpx

from ...config import Settings, settings as default_settings
from ...models.domain import ExternalRouteData, Segment, TrafficCondition
from .traffic import classify_traffic, current_traffic_condition

logger = logging.getLogger(__name__)

# Duration ratios (in traffic / typical) above which a leg counts as congested.
HEAVY_TRAFFIC_RATIO = 1.5
MODERATE_TRAFFIC_RATIO = 1.2


class RoutingServiceError(Exception):
    """Raised when the external routing service cannot produce a route."""


def _traffic_from_legs(legs: Sequence[dict]) -> TrafficCondition | None:
    """Derive the worst traffic band from legs annotated with a typical duration."""

    worst: TrafficCondition | None = None
    for leg in legs:
        typical = leg.get("duration_typical")
        actual = leg.get("duration")
        if not typical or actual is None:
            continue
        ratio = float(actual) / float(typical)
        if ratio > HEAVY_TRAFFIC_RATIO:
            return TrafficCondition.HEAVY
        if ratio > MODERATE_TRAFFIC_RATIO:
            worst = TrafficCondition.MODERATE
        elif worst is None:
            worst = TrafficCondition.LIGHT
    return worst


class OSRMRouteClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        *,
        config: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        config = config or default_settings
        self.base_url = (base_url or config.routing_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("Routing service base URL is not configured.")
        self.profile = profile or config.routing_profile
        self.timeout = timeout if timeout is not None else config.routing_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else config.routing_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else config.routing_backoff_seconds
        self.traffic_timezone = config.traffic_timezone
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self._transport,
        )

    def _request(self, url: str, params: dict[str, str]) -> dict:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise RoutingServiceError("OSRM returned an unexpected response body")
                    if data.get("code") != "Ok" or not data.get("routes"):
                        message = data.get("message", "route not available")
                        raise RoutingServiceError(f"OSRM route request failed: {message}")
                    return data
                except httpx.HTTPStatusError as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise RoutingServiceError(
                            f"OSRM returned HTTP {exc.response.status_code} for route request"
                        ) from exc
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"OSRM route request timed out after {self.max_retries} retries: {exc}")
                        raise RoutingServiceError("OSRM route request timed out") from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM route timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except httpx.TransportError as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise RoutingServiceError(
                            f"Failed to connect to OSRM service at {self.base_url}: {exc}"
                        ) from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {exc}")
                    time.sleep(wait_time)
                except ValueError as exc:
                    raise RoutingServiceError(f"OSRM returned an unreadable response: {exc}") from exc
        finally:
            client.close()

    def route(
        self,
        coordinates: Sequence[tuple[float, float]],
        *,
        now: datetime | None = None,
    ) -> ExternalRouteData:
        """Fetch the driving route through ``coordinates`` given as (lat, lon) pairs.

        Distances are returned in kilometres and durations in minutes. When the
        service does not annotate typical durations the traffic band falls back
        to the time-of-day classification.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for OSRM route.")

        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in coordinates)
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        data = self._request(url, params={"overview": "false", "steps": "false"})

        try:
            route = data["routes"][0]
            legs = route.get("legs") or []
            waypoint_data = [
                Segment(distance=float(leg.get("distance", 0.0)) / 1000.0, duration=float(leg.get("duration", 0.0)) / 60.0)
                for leg in legs
            ]
            distance = float(route.get("distance", 0.0)) / 1000.0
            duration = float(route.get("duration", 0.0)) / 60.0
            traffic = _traffic_from_legs(legs)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError, ZeroDivisionError) as exc:
            raise RoutingServiceError(f"OSRM returned a malformed route: {exc}") from exc

        if traffic is None:
            if now is None:
                traffic = current_traffic_condition(self.traffic_timezone)
            else:
                traffic = classify_traffic(now, self.traffic_timezone)

        result = ExternalRouteData(
            distance=distance,
            duration=duration,
            waypoint_data=waypoint_data,
            traffic_conditions=traffic,
        )
        logger.info(
            f"OSRM route through {len(coordinates)} waypoints: {result.distance:.1f} km, {result.duration:.1f} min"
        )
        return result


def check_health(base_url: str | None = None, *, config: Settings | None = None) -> bool:
    """Check OSRM service health by requesting a short two-point route."""
    config = config or default_settings
    base = (base_url or config.routing_base_url or "").rstrip("/")
    if not base:
        return False
    try:
        test_coords = "18.423300,-33.918861;18.473900,-33.925800"
        url = f"{base}/route/v1/{config.routing_profile}/{test_coords}"
        response = httpx.get(url, params={"overview": "false"}, timeout=5.0)
        response.raise_for_status()
        data = response.json()
        return data.get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
