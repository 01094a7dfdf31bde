"""
Routes API router.

Lists voyage routes, selects the baseline route and compares an
alternative route against it.
"""

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from api.auth import get_api_key
from api.dependencies import get_route_service
from api.rate_limit import limiter, get_rate_limit_string
from api.schemas import BaselineResponse, ComparisonResponse, RouteResponse
from src.compliance.records import Route
from src.compliance.services import RouteService

router = APIRouter(prefix="/api/routes", tags=["Routes"])


@router.get("", response_model=List[RouteResponse])
async def list_routes(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    service: RouteService = Depends(get_route_service),
):
    """List routes, optionally for a single year."""
    return [_route_response(r) for r in service.get_routes(year)]


@router.get("/comparison", response_model=ComparisonResponse)
async def compare_route(
    route_id: str = Query(..., min_length=1, max_length=50),
    service: RouteService = Depends(get_route_service),
):
    """Compare a route against the current baseline."""
    comparison = service.compare(route_id)
    return ComparisonResponse(**asdict(comparison))


@router.post("/{route_id}/baseline", response_model=BaselineResponse)
@limiter.limit(get_rate_limit_string())
async def set_baseline(
    request: Request,
    route_id: str,
    api_key=Depends(get_api_key),
    service: RouteService = Depends(get_route_service),
):
    """Make ``route_id`` the single baseline route."""
    service.set_baseline(route_id)
    return BaselineResponse(status="baseline_set", route_id=route_id)


def _route_response(route: Route) -> RouteResponse:
    return RouteResponse(
        route_id=route.route_id,
        vessel_type=route.vessel_type.value,
        fuel_type=route.fuel_type.value,
        year=route.year,
        ghg_intensity=route.ghg_intensity,
        fuel_consumption=route.fuel_consumption,
        distance=route.distance,
        total_emissions=route.total_emissions,
        is_baseline=route.is_baseline,
    )
