"""FuelEU Maritime compliance, banking and pooling API schemas."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Compliance balance
# ---------------------------------------------------------------------------

class ComplianceBalanceResponse(BaseModel):
    """Computed compliance balance for a ship/year."""
    ship_id: str
    year: int
    cb_gco2eq: float
    status: str


class AdjustedBalanceResponse(BaseModel):
    """Stored CB with banked surplus overlaid."""
    ship_id: str
    year: int
    raw_cb_gco2eq: float
    banked_surplus: float
    cb_gco2eq: float
    status: str


# ---------------------------------------------------------------------------
# Banking (Article 20)
# ---------------------------------------------------------------------------

class BankSurplusRequest(BaseModel):
    """Bank part of a ship's surplus. Amount is checked by the ledger."""
    ship_id: str = Field(..., min_length=1, max_length=50)
    amount_gco2eq: float
    year: int = Field(..., ge=2000, le=2100)


class ApplyBankedRequest(BaseModel):
    """Apply previously banked surplus."""
    ship_id: str = Field(..., min_length=1, max_length=50)
    amount_gco2eq: float


class BankEntryResponse(BaseModel):
    id: str
    ship_id: str
    year: int
    amount_gco2eq: float


class BankLedgerResponse(BaseModel):
    entries: List[BankEntryResponse]
    total_banked: float


# ---------------------------------------------------------------------------
# Pooling (Article 21)
# ---------------------------------------------------------------------------

class CreatePoolRequest(BaseModel):
    """Pool the listed ships' CB for one year."""
    ship_ids: List[str] = Field(..., max_length=100)
    year: int = Field(..., ge=2000, le=2100)


class PoolMemberResponse(BaseModel):
    ship_id: str
    cb_before: float
    cb_after: float


class PoolResponse(BaseModel):
    pool_id: str
    year: int
    created_at: datetime
    members: List[PoolMemberResponse]
    net_cb: float


class PoolCreatedResponse(PoolResponse):
    total_surplus_before: float
    total_deficit_before: float


class PoolListResponse(BaseModel):
    pools: List[PoolResponse]
    total: int
