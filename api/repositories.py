"""
SQLAlchemy implementations of the compliance storage interfaces.

Each write method is one transactional unit: it commits on success and
rolls the session back before re-raising on any failure.
"""

from contextlib import contextmanager
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from api.models import (
    BankEntryRow,
    ComplianceBalanceRow,
    PoolMemberRow,
    PoolRow,
    RouteRow,
)
from src.compliance.records import (
    BankEntry,
    ComplianceBalance,
    FuelType,
    Pool,
    PoolMember,
    PoolWithMembers,
    Route,
    VesselType,
)
from src.compliance.stores import BankStore, ComplianceStore, PoolStore, RouteStore


@contextmanager
def _atomic(db: Session):
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


# =============================================================================
# Routes
# =============================================================================

def _route_to_domain(row: RouteRow) -> Route:
    return Route(
        route_id=row.route_id,
        vessel_type=VesselType(row.vessel_type),
        fuel_type=FuelType(row.fuel_type),
        year=row.year,
        ghg_intensity=row.ghg_intensity,
        fuel_consumption=row.fuel_consumption,
        distance=row.distance,
        total_emissions=row.total_emissions,
        is_baseline=row.is_baseline,
    )


def _apply_route(row: RouteRow, route: Route) -> RouteRow:
    row.route_id = route.route_id
    row.vessel_type = VesselType(route.vessel_type).value
    row.fuel_type = FuelType(route.fuel_type).value
    row.year = route.year
    row.ghg_intensity = route.ghg_intensity
    row.fuel_consumption = route.fuel_consumption
    row.distance = route.distance
    row.total_emissions = route.total_emissions
    row.is_baseline = route.is_baseline
    return row


class SqlRouteStore(RouteStore):

    def __init__(self, db: Session):
        self.db = db

    def find_all(self, year: Optional[int] = None) -> List[Route]:
        query = self.db.query(RouteRow)
        if year is not None:
            query = query.filter(RouteRow.year == year)
        return [_route_to_domain(r) for r in query.order_by(RouteRow.route_id).all()]

    def find_by_route_id(self, route_id: str) -> Optional[Route]:
        row = self.db.query(RouteRow).filter(RouteRow.route_id == route_id).first()
        return _route_to_domain(row) if row else None

    def find_baseline(self) -> Optional[Route]:
        row = self.db.query(RouteRow).filter(RouteRow.is_baseline.is_(True)).first()
        return _route_to_domain(row) if row else None

    def set_baseline(self, route_id: str) -> None:
        with _atomic(self.db):
            self.db.query(RouteRow).update(
                {RouteRow.is_baseline: False}, synchronize_session=False
            )
            self.db.query(RouteRow).filter(RouteRow.route_id == route_id).update(
                {RouteRow.is_baseline: True}, synchronize_session=False
            )

    def save(self, route: Route) -> None:
        with _atomic(self.db):
            row = self.db.query(RouteRow).filter(RouteRow.route_id == route.route_id).first()
            if row is None:
                row = RouteRow()
                self.db.add(row)
            _apply_route(row, route)

    def seed_all(self, routes: Sequence[Route]) -> None:
        with _atomic(self.db):
            self.db.query(RouteRow).delete(synchronize_session=False)
            for route in routes:
                self.db.add(_apply_route(RouteRow(), route))


# =============================================================================
# Compliance balances
# =============================================================================

def _balance_to_domain(row: ComplianceBalanceRow) -> ComplianceBalance:
    return ComplianceBalance(ship_id=row.ship_id, year=row.year, cb_gco2eq=row.cb_gco2eq)


class SqlComplianceStore(ComplianceStore):

    def __init__(self, db: Session):
        self.db = db

    def find_by_ship_and_year(self, ship_id: str, year: int) -> Optional[ComplianceBalance]:
        row = (
            self.db.query(ComplianceBalanceRow)
            .filter(ComplianceBalanceRow.ship_id == ship_id, ComplianceBalanceRow.year == year)
            .first()
        )
        return _balance_to_domain(row) if row else None

    def find_all(self, year: Optional[int] = None) -> List[ComplianceBalance]:
        query = self.db.query(ComplianceBalanceRow)
        if year is not None:
            query = query.filter(ComplianceBalanceRow.year == year)
        rows = query.order_by(ComplianceBalanceRow.ship_id, ComplianceBalanceRow.year).all()
        return [_balance_to_domain(r) for r in rows]

    def save(self, record: ComplianceBalance) -> None:
        self.save_all([record])

    def save_all(self, records: Sequence[ComplianceBalance]) -> None:
        pending: Dict[Tuple[str, int], ComplianceBalanceRow] = {}
        with _atomic(self.db):
            for rec in records:
                key = (rec.ship_id, rec.year)
                row = pending.get(key)
                if row is None:
                    row = (
                        self.db.query(ComplianceBalanceRow)
                        .filter(
                            ComplianceBalanceRow.ship_id == rec.ship_id,
                            ComplianceBalanceRow.year == rec.year,
                        )
                        .first()
                    )
                if row is None:
                    row = ComplianceBalanceRow(ship_id=rec.ship_id, year=rec.year)
                    self.db.add(row)
                row.cb_gco2eq = rec.cb_gco2eq
                pending[key] = row


# =============================================================================
# Bank ledger
# =============================================================================

def _entry_to_domain(row: BankEntryRow) -> BankEntry:
    return BankEntry(
        id=str(row.id),
        ship_id=row.ship_id,
        year=row.year,
        amount_gco2eq=row.amount_gco2eq,
    )


class SqlBankStore(BankStore):

    def __init__(self, db: Session):
        self.db = db

    def find_by_ship_id(self, ship_id: str) -> List[BankEntry]:
        rows = (
            self.db.query(BankEntryRow)
            .filter(BankEntryRow.ship_id == ship_id)
            .order_by(BankEntryRow.year, BankEntryRow.created_at)
            .all()
        )
        return [_entry_to_domain(r) for r in rows]

    def get_total_banked(self, ship_id: str) -> float:
        total = (
            self.db.query(func.coalesce(func.sum(BankEntryRow.amount_gco2eq), 0.0))
            .filter(BankEntryRow.ship_id == ship_id)
            .scalar()
        )
        return float(total or 0.0)

    def save(self, entry: BankEntry) -> None:
        with _atomic(self.db):
            self.db.add(BankEntryRow(
                id=entry.id,
                ship_id=entry.ship_id,
                year=entry.year,
                amount_gco2eq=entry.amount_gco2eq,
            ))

    def find_all(self) -> List[BankEntry]:
        rows = (
            self.db.query(BankEntryRow)
            .order_by(BankEntryRow.ship_id, BankEntryRow.year, BankEntryRow.created_at)
            .all()
        )
        return [_entry_to_domain(r) for r in rows]


# =============================================================================
# Pools
# =============================================================================

def _pool_to_domain(row: PoolRow) -> PoolWithMembers:
    return PoolWithMembers(
        pool=Pool(id=str(row.id), year=row.year, created_at=row.created_at),
        members=[
            PoolMember(
                pool_id=str(m.pool_id),
                ship_id=m.ship_id,
                cb_before=m.cb_before,
                cb_after=m.cb_after,
            )
            for m in row.members
        ],
    )


class SqlPoolStore(PoolStore):

    def __init__(self, db: Session):
        self.db = db

    def create_pool(self, pool: Pool, members: Sequence[PoolMember]) -> None:
        with _atomic(self.db):
            row = PoolRow(id=pool.id, year=pool.year, created_at=pool.created_at)
            for m in members:
                row.members.append(PoolMemberRow(
                    ship_id=m.ship_id,
                    cb_before=m.cb_before,
                    cb_after=m.cb_after,
                ))
            self.db.add(row)

    def find_by_id(self, pool_id: str) -> Optional[PoolWithMembers]:
        row = self.db.query(PoolRow).filter(PoolRow.id == pool_id).first()
        return _pool_to_domain(row) if row else None

    def find_all(self, year: Optional[int] = None) -> List[PoolWithMembers]:
        query = self.db.query(PoolRow)
        if year is not None:
            query = query.filter(PoolRow.year == year)
        return [_pool_to_domain(r) for r in query.order_by(PoolRow.created_at.desc()).all()]
