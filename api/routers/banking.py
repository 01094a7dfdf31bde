"""
FuelEU banking (Article 20) API router.

Write endpoints require an API key. Amount and surplus rules are
enforced by the banking service; violations surface as domain errors.
"""

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.auth import get_api_key
from api.dependencies import get_banking_service
from api.rate_limit import limiter, get_rate_limit_string
from api.schemas import (
    ApplyBankedRequest,
    BankEntryResponse,
    BankLedgerResponse,
    BankSurplusRequest,
)
from src.compliance.services import BankingService

router = APIRouter(prefix="/api/banking", tags=["FuelEU Banking"])


@router.get("/records", response_model=BankLedgerResponse)
async def get_bank_records(
    ship_id: Optional[str] = Query(None, min_length=1, max_length=50),
    service: BankingService = Depends(get_banking_service),
):
    """
    Ledger entries, oldest first.

    ``total_banked`` is the ship's running total when ``ship_id`` is given,
    otherwise the sum over every returned entry.
    """
    entries = service.get_ledger(ship_id)
    if ship_id is not None:
        total = service.get_total_banked(ship_id)
    else:
        total = sum(e.amount_gco2eq for e in entries)

    return BankLedgerResponse(
        entries=[BankEntryResponse(**asdict(e)) for e in entries],
        total_banked=total,
    )


@router.post("/bank", response_model=BankEntryResponse, status_code=201)
@limiter.limit(get_rate_limit_string())
async def bank_surplus(
    request: Request,
    body: BankSurplusRequest,
    api_key=Depends(get_api_key),
    service: BankingService = Depends(get_banking_service),
):
    """Bank part or all of a ship's positive CB for a year."""
    entry = service.bank_surplus(body.ship_id, body.amount_gco2eq, body.year)
    return BankEntryResponse(**asdict(entry))


@router.post("/apply", response_model=BankEntryResponse)
@limiter.limit(get_rate_limit_string())
async def apply_banked_surplus(
    request: Request,
    body: ApplyBankedRequest,
    api_key=Depends(get_api_key),
    service: BankingService = Depends(get_banking_service),
):
    """Withdraw previously banked surplus. Recorded as a negative entry."""
    entry = service.apply_banked_surplus(body.ship_id, body.amount_gco2eq)
    return BankEntryResponse(**asdict(entry))
