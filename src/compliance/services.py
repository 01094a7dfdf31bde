"""
Application services for FuelEU compliance workflows.

Each service sequences store reads, pure domain calculations and store
writes. Domain errors are raised where a rule is violated and propagate
unchanged to the caller.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from .errors import (
    ComplianceRecordNotFoundError,
    DuplicatePoolMemberError,
    InsufficientBankedError,
    InsufficientSurplusError,
    InvalidAmountError,
    NoBaselineSetError,
    PoolNotFoundError,
    RouteNotFoundError,
)
from .fueleu import RouteComparison, balance_status, compare_routes, compute_compliance_balance
from .pooling import ShipBalance, allocate_pool, verify_allocation
from .records import BankEntry, ComplianceBalance, Pool, PoolMember, PoolWithMembers, Route
from .stores import BankStore, ComplianceStore, PoolStore, RouteStore

logger = logging.getLogger(__name__)


def _current_year() -> int:
    return datetime.now(timezone.utc).year


# =============================================================================
# Result dataclasses
# =============================================================================

@dataclass
class BalanceView:
    """Computed compliance balance with its status."""
    ship_id: str
    year: int
    cb_gco2eq: float
    status: str


@dataclass
class AdjustedBalance:
    """Stored CB overlaid with the ship's banked surplus."""
    ship_id: str
    year: int
    raw_cb_gco2eq: float
    banked_surplus: float
    cb_gco2eq: float  # raw + banked
    status: str


@dataclass
class PoolResult:
    pool_id: str
    year: int
    created_at: datetime
    net_cb: float
    total_surplus_before: float
    total_deficit_before: float
    members: List[PoolMember] = field(default_factory=list)


# =============================================================================
# Routes
# =============================================================================

class RouteService:
    """Route listing, baseline selection and baseline comparison."""

    def __init__(self, routes: RouteStore):
        self.routes = routes

    def get_routes(self, year: Optional[int] = None) -> List[Route]:
        return self.routes.find_all(year)

    def set_baseline(self, route_id: str) -> None:
        if self.routes.find_by_route_id(route_id) is None:
            raise RouteNotFoundError(route_id)
        self.routes.set_baseline(route_id)
        logger.info("Baseline route set to %s", route_id)

    def compare(self, alternative_route_id: str) -> RouteComparison:
        baseline = self.routes.find_baseline()
        if baseline is None:
            raise NoBaselineSetError()

        alternative = self.routes.find_by_route_id(alternative_route_id)
        if alternative is None:
            raise RouteNotFoundError(alternative_route_id)

        return compare_routes(baseline, alternative)

    def seed(self, routes: Sequence[Route]) -> None:
        self.routes.seed_all(routes)
        logger.info("Seeded %d routes", len(routes))


# =============================================================================
# Compliance balance
# =============================================================================

class ComplianceService:
    """Computes and caches CB per ship/year; serves the adjusted view."""

    def __init__(self, routes: RouteStore, compliance: ComplianceStore, bank: BankStore):
        self.routes = routes
        self.compliance = compliance
        self.bank = bank

    def compute_balances(self, year: Optional[int] = None) -> List[BalanceView]:
        """
        Recompute CB for every route in scope and upsert the snapshots.

        The ship id of each snapshot is the route id.
        """
        records = [
            ComplianceBalance(
                ship_id=r.route_id,
                year=r.year,
                cb_gco2eq=compute_compliance_balance(r.ghg_intensity, r.fuel_consumption),
            )
            for r in self.routes.find_all(year)
        ]
        self.compliance.save_all(records)
        logger.info("Computed %d compliance balances (year=%s)", len(records), year)

        return [
            BalanceView(rec.ship_id, rec.year, rec.cb_gco2eq, balance_status(rec.cb_gco2eq))
            for rec in records
        ]

    def get_adjusted_balances(self, year: Optional[int] = None) -> List[AdjustedBalance]:
        """Stored CB plus total banked, computed on read."""
        results = []
        for rec in self.compliance.find_all(year):
            banked = self.bank.get_total_banked(rec.ship_id)
            adjusted = rec.cb_gco2eq + banked
            results.append(AdjustedBalance(
                ship_id=rec.ship_id,
                year=rec.year,
                raw_cb_gco2eq=rec.cb_gco2eq,
                banked_surplus=banked,
                cb_gco2eq=adjusted,
                status=balance_status(adjusted),
            ))
        return results


# =============================================================================
# Banking (Article 20)
# =============================================================================

class BankingService:
    """Append-only surplus ledger: deposit earned surplus, withdraw it later."""

    def __init__(
        self,
        compliance: ComplianceStore,
        bank: BankStore,
        clock: Callable[[], int] = _current_year,
    ):
        self.compliance = compliance
        self.bank = bank
        self.clock = clock

    def bank_surplus(self, ship_id: str, amount: float, year: int) -> BankEntry:
        """
        Bank part or all of a ship's surplus for ``year``.

        Raises:
            InvalidAmountError: amount <= 0
            ComplianceRecordNotFoundError: no CB snapshot for ship/year
            InsufficientSurplusError: CB <= 0 or amount above CB
        """
        if not amount > 0:
            raise InvalidAmountError(amount)

        record = self.compliance.find_by_ship_and_year(ship_id, year)
        if record is None:
            raise ComplianceRecordNotFoundError(ship_id, year)

        if record.cb_gco2eq <= 0 or amount > record.cb_gco2eq:
            logger.warning(
                "Bank rejected for %s: amount %.2f, CB %.2f",
                ship_id, amount, record.cb_gco2eq,
            )
            raise InsufficientSurplusError(ship_id)

        entry = BankEntry(id=str(uuid.uuid4()), ship_id=ship_id, year=year, amount_gco2eq=amount)
        self.bank.save(entry)
        logger.info("Banked %.2f gCO2eq for %s (%d)", amount, ship_id, year)
        return entry

    def apply_banked_surplus(self, ship_id: str, amount: float) -> BankEntry:
        """
        Withdraw banked surplus by appending a negative entry.

        Raises:
            InvalidAmountError: amount <= 0
            InsufficientBankedError: amount above the ship's total banked
        """
        if not amount > 0:
            raise InvalidAmountError(amount)

        available = self.bank.get_total_banked(ship_id)
        if amount > available:
            logger.warning(
                "Apply rejected for %s: requested %.2f, banked %.2f",
                ship_id, amount, available,
            )
            raise InsufficientBankedError(ship_id, amount, available)

        entry = BankEntry(
            id=str(uuid.uuid4()),
            ship_id=ship_id,
            year=self.clock(),
            amount_gco2eq=-amount,
        )
        self.bank.save(entry)
        logger.info("Applied %.2f gCO2eq banked surplus for %s", amount, ship_id)
        return entry

    def get_ledger(self, ship_id: Optional[str] = None) -> List[BankEntry]:
        if ship_id is None:
            return self.bank.find_all()
        return self.bank.find_by_ship_id(ship_id)

    def get_total_banked(self, ship_id: str) -> float:
        return self.bank.get_total_banked(ship_id)


# =============================================================================
# Pooling (Article 21)
# =============================================================================

class PoolingService:
    """Creates and reads compliance pools."""

    def __init__(self, compliance: ComplianceStore, pools: PoolStore):
        self.compliance = compliance
        self.pools = pools

    def create_pool(self, ship_ids: Sequence[str], year: int) -> PoolResult:
        """
        Pool the given ships' CB for ``year`` and persist the allocation.

        Every CB lookup happens before allocation, so a missing record
        leaves storage untouched. Allocator errors propagate unchanged.
        """
        seen = set()
        for ship_id in ship_ids:
            if ship_id in seen:
                raise DuplicatePoolMemberError(ship_id)
            seen.add(ship_id)

        balances = []
        for ship_id in ship_ids:
            record = self.compliance.find_by_ship_and_year(ship_id, year)
            if record is None:
                raise ComplianceRecordNotFoundError(ship_id, year)
            balances.append(ShipBalance(record.ship_id, record.cb_gco2eq))

        pool = Pool(id=str(uuid.uuid4()), year=year, created_at=datetime.now(timezone.utc))
        allocation = allocate_pool(pool.id, balances)
        verify_allocation(allocation.members)

        self.pools.create_pool(pool, allocation.members)
        logger.info(
            "Created pool %s for %d with %d members (net %.2f)",
            pool.id, year, len(allocation.members), allocation.net_cb,
        )

        return PoolResult(
            pool_id=pool.id,
            year=pool.year,
            created_at=pool.created_at,
            net_cb=allocation.net_cb,
            total_surplus_before=allocation.total_surplus_before,
            total_deficit_before=allocation.total_deficit_before,
            members=allocation.members,
        )

    def get_pool(self, pool_id: str) -> PoolWithMembers:
        found = self.pools.find_by_id(pool_id)
        if found is None:
            raise PoolNotFoundError(pool_id)
        return found

    def list_pools(self, year: Optional[int] = None) -> List[PoolWithMembers]:
        return self.pools.find_all(year)
