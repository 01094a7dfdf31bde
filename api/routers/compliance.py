"""
FuelEU Maritime (EU 2023/1805) compliance balance API router.

Computes CB per route/ship and serves the banked-adjusted view.
"""

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_compliance_service
from api.schemas import AdjustedBalanceResponse, ComplianceBalanceResponse
from src.compliance.services import ComplianceService

router = APIRouter(prefix="/api/compliance", tags=["FuelEU Compliance"])


@router.get("/cb", response_model=List[ComplianceBalanceResponse])
async def get_compliance_balances(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    service: ComplianceService = Depends(get_compliance_service),
):
    """
    Compute compliance balance for every route in scope.

    Results are upserted as the ship/year CB snapshots used by banking
    and pooling.
    """
    return [ComplianceBalanceResponse(**asdict(b)) for b in service.compute_balances(year)]


@router.get("/adjusted-cb", response_model=List[AdjustedBalanceResponse])
async def get_adjusted_balances(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    service: ComplianceService = Depends(get_compliance_service),
):
    """Stored CB with each ship's banked surplus added."""
    return [AdjustedBalanceResponse(**asdict(b)) for b in service.get_adjusted_balances(year)]
