"""
FuelPool API Pydantic schemas.

Re-exports all schema classes:
    from api.schemas import RouteResponse, CreatePoolRequest, ...
"""

# Routes
from .routes import RouteResponse, BaselineResponse, ComparisonResponse  # noqa: F401

# FuelEU compliance, banking, pooling
from .fueleu import (  # noqa: F401
    ComplianceBalanceResponse,
    AdjustedBalanceResponse,
    BankSurplusRequest,
    ApplyBankedRequest,
    BankEntryResponse,
    BankLedgerResponse,
    CreatePoolRequest,
    PoolMemberResponse,
    PoolResponse,
    PoolCreatedResponse,
    PoolListResponse,
)
