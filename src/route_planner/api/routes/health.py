"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_routing_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.osrm_client import check_health as routing_health_check
    return routing_health_check


@router.get("/health/routing", status_code=status.HTTP_200_OK)
def health_routing() -> dict:
    """Check the external routing service, if one is configured."""
    if not settings.routing_base_url:
        return {
            "service": "osrm",
            "configured": False,
            "healthy": False,
            "message": "Routing service not configured; local estimates are used. Set CRP_ROUTING_BASE_URL to enable it.",
        }
    routing_health_check = _get_routing_health_check()
    return {"service": "osrm", "configured": True, "healthy": routing_health_check()}
