"""Routing endpoints."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from ...schemas.routing import RoutePlanRequest, RoutePlanResponse, SequenceRequest, SequenceResponse
from ...services.outputs.routing_formatter import route_plan_to_csv, route_plan_to_json
from ...services.routing.service import plan_route, sequence_stops

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: RoutePlanRequest) -> RoutePlanResponse:
    try:
        return plan_route(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error planning route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan route: {str(exc)}"
        ) from exc


@router.post("/sequence", response_model=SequenceResponse, status_code=status.HTTP_200_OK)
def sequence(payload: SequenceRequest) -> SequenceResponse:
    """Reorder the middle stops without computing metrics."""
    try:
        return sequence_stops(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error sequencing stops: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to sequence stops: {str(exc)}"
        ) from exc


@router.post("/plan/export", status_code=status.HTTP_200_OK)
def export_plan(
    payload: RoutePlanRequest,
    format: Literal["csv", "json"] = Query(default="csv", description="Export format"),
):
    """Plan a route and return the per-stop breakdown as CSV or JSON."""
    try:
        result = plan_route(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error exporting route plan: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to export route plan: {str(exc)}"
        ) from exc

    if format == "json":
        return route_plan_to_json(result)
    return PlainTextResponse(
        route_plan_to_csv(result),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="route_plan.csv"'},
    )
