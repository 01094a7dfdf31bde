"""
Domain records exchanged between services and storage.

These are plain dataclasses; the SQLAlchemy rows in ``api.models`` are
mapped to and from them by ``api.repositories``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List


class VesselType(str, Enum):
    CONTAINER = "Container"
    BULK_CARRIER = "BulkCarrier"
    TANKER = "Tanker"
    RORO = "RoRo"


class FuelType(str, Enum):
    HFO = "HFO"
    LNG = "LNG"
    MGO = "MGO"
    VLSFO = "VLSFO"
    METHANOL = "Methanol"


@dataclass
class Route:
    """A voyage record used to derive a ship's compliance balance."""
    route_id: str
    vessel_type: VesselType
    fuel_type: FuelType
    year: int
    ghg_intensity: float  # gCO2e/MJ
    fuel_consumption: float  # tonnes
    distance: float  # km
    total_emissions: float  # tonnes
    is_baseline: bool = False


@dataclass
class ComplianceBalance:
    """CB snapshot for a ship/year (positive=surplus, negative=deficit)."""
    ship_id: str
    year: int
    cb_gco2eq: float


@dataclass
class BankEntry:
    """Append-only ledger line. Withdrawals are negative amounts."""
    id: str
    ship_id: str
    year: int
    amount_gco2eq: float


@dataclass
class Pool:
    id: str
    year: int
    created_at: datetime


@dataclass(frozen=True)
class PoolMember:
    pool_id: str
    ship_id: str
    cb_before: float
    cb_after: float


@dataclass
class PoolWithMembers:
    pool: Pool
    members: List[PoolMember] = field(default_factory=list)
