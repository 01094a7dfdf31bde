"""
Storage interfaces used by the compliance services.

Concrete SQLAlchemy implementations live in ``api.repositories``; services
depend only on these abstractions so they can be exercised against any
backing store.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .records import BankEntry, ComplianceBalance, Pool, PoolMember, PoolWithMembers, Route


class RouteStore(ABC):

    @abstractmethod
    def find_all(self, year: Optional[int] = None) -> List[Route]:
        """Routes ordered by route_id, optionally for one year."""

    @abstractmethod
    def find_by_route_id(self, route_id: str) -> Optional[Route]:
        ...

    @abstractmethod
    def find_baseline(self) -> Optional[Route]:
        ...

    @abstractmethod
    def set_baseline(self, route_id: str) -> None:
        """Clear any existing baseline and mark ``route_id``, atomically."""

    @abstractmethod
    def save(self, route: Route) -> None:
        """Insert or update by route_id."""

    @abstractmethod
    def seed_all(self, routes: Sequence[Route]) -> None:
        """Replace every route with ``routes``, atomically."""


class ComplianceStore(ABC):

    @abstractmethod
    def find_by_ship_and_year(self, ship_id: str, year: int) -> Optional[ComplianceBalance]:
        ...

    @abstractmethod
    def find_all(self, year: Optional[int] = None) -> List[ComplianceBalance]:
        ...

    @abstractmethod
    def save(self, record: ComplianceBalance) -> None:
        """Upsert on (ship_id, year)."""

    @abstractmethod
    def save_all(self, records: Sequence[ComplianceBalance]) -> None:
        """Bulk upsert on (ship_id, year), all or nothing."""


class BankStore(ABC):

    @abstractmethod
    def find_by_ship_id(self, ship_id: str) -> List[BankEntry]:
        ...

    @abstractmethod
    def get_total_banked(self, ship_id: str) -> float:
        """Sum of every ledger amount for the ship (0 when none)."""

    @abstractmethod
    def save(self, entry: BankEntry) -> None:
        """Append a ledger line. Entries are never updated."""

    @abstractmethod
    def find_all(self) -> List[BankEntry]:
        ...


class PoolStore(ABC):

    @abstractmethod
    def create_pool(self, pool: Pool, members: Sequence[PoolMember]) -> None:
        """Insert the pool and all members, all or nothing."""

    @abstractmethod
    def find_by_id(self, pool_id: str) -> Optional[PoolWithMembers]:
        ...

    @abstractmethod
    def find_all(self, year: Optional[int] = None) -> List[PoolWithMembers]:
        ...
