"""
FuelEU pooling (Article 21) API router.

Creates pools from stored ship/year CB snapshots and reads them back.
"""

import uuid as uuid_mod
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.auth import get_api_key
from api.dependencies import get_pooling_service
from api.rate_limit import limiter, get_rate_limit_string
from api.schemas import (
    CreatePoolRequest,
    PoolCreatedResponse,
    PoolListResponse,
    PoolMemberResponse,
    PoolResponse,
)
from src.compliance.records import PoolMember, PoolWithMembers
from src.compliance.services import PoolingService

router = APIRouter(prefix="/api/pools", tags=["FuelEU Pooling"])


# ---- helpers ----------------------------------------------------------------

def _member_response(m: PoolMember) -> PoolMemberResponse:
    return PoolMemberResponse(ship_id=m.ship_id, cb_before=m.cb_before, cb_after=m.cb_after)


def _pool_response(found: PoolWithMembers) -> PoolResponse:
    return PoolResponse(
        pool_id=found.pool.id,
        year=found.pool.year,
        created_at=found.pool.created_at,
        members=[_member_response(m) for m in found.members],
        net_cb=sum(m.cb_before for m in found.members),
    )


def _validate_pool_id(pool_id: str) -> str:
    try:
        return str(uuid_mod.UUID(pool_id))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid pool ID format")


# ---- endpoints --------------------------------------------------------------

@router.post("", response_model=PoolCreatedResponse, status_code=201)
@limiter.limit(get_rate_limit_string())
async def create_pool(
    request: Request,
    body: CreatePoolRequest,
    api_key=Depends(get_api_key),
    service: PoolingService = Depends(get_pooling_service),
):
    """
    Pool the listed ships' CB for a year.

    Surplus is moved greedily from the largest surpluses to the largest
    deficits. The pool must have at least two members and a non-negative
    net CB.
    """
    result = service.create_pool(body.ship_ids, body.year)
    return PoolCreatedResponse(
        pool_id=result.pool_id,
        year=result.year,
        created_at=result.created_at,
        members=[_member_response(m) for m in result.members],
        net_cb=result.net_cb,
        total_surplus_before=result.total_surplus_before,
        total_deficit_before=result.total_deficit_before,
    )


@router.get("", response_model=PoolListResponse)
async def list_pools(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    service: PoolingService = Depends(get_pooling_service),
):
    """List pools, newest first."""
    pools = [_pool_response(p) for p in service.list_pools(year)]
    return PoolListResponse(pools=pools, total=len(pools))


@router.get("/{pool_id}", response_model=PoolResponse)
async def get_pool(
    pool_id: str,
    service: PoolingService = Depends(get_pooling_service),
):
    """Pool detail with member allocations."""
    return _pool_response(service.get_pool(_validate_pool_id(pool_id)))
