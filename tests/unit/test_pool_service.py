"""
Unit tests for pool creation and reads (FuelEU Article 21).

Covers lookup-before-write ordering, persistence of the allocation and
propagation of allocator errors.
"""

import math
from unittest.mock import Mock

import pytest

from api.repositories import SqlComplianceStore, SqlPoolStore
from src.compliance.errors import (
    ComplianceRecordNotFoundError,
    DuplicatePoolMemberError,
    InsufficientMembersError,
    PoolNetNegativeError,
    PoolNotFoundError,
)
from src.compliance.services import PoolingService
from src.compliance.stores import PoolStore


@pytest.fixture
def pooling(db, ship_balances):
    return PoolingService(SqlComplianceStore(db), SqlPoolStore(db))


class TestCreatePool:
    def test_create_and_persist(self, pooling):
        result = pooling.create_pool(["SHIP-A", "SHIP-B", "SHIP-C"], 2024)

        assert result.year == 2024
        assert result.net_cb == pytest.approx(200.0)
        assert result.total_surplus_before == pytest.approx(500.0)
        assert result.total_deficit_before == pytest.approx(-300.0)
        after = {m.ship_id: m.cb_after for m in result.members}
        assert after == pytest.approx({"SHIP-A": 200.0, "SHIP-B": 0.0, "SHIP-C": 0.0})

        stored = pooling.get_pool(result.pool_id)
        assert stored.pool.year == 2024
        assert {m.ship_id for m in stored.members} == {"SHIP-A", "SHIP-B", "SHIP-C"}
        assert all(m.pool_id == result.pool_id for m in stored.members)
        assert math.fsum(m.cb_after for m in stored.members) == pytest.approx(200.0)

    def test_zero_member_kept(self, pooling):
        result = pooling.create_pool(["SHIP-D", "SHIP-A", "SHIP-C"], 2024)
        d = next(m for m in result.members if m.ship_id == "SHIP-D")
        assert (d.cb_before, d.cb_after) == (0.0, 0.0)

    def test_members_without_record_reject_whole_pool(self, pooling):
        with pytest.raises(ComplianceRecordNotFoundError) as exc:
            pooling.create_pool(["SHIP-A", "SHIP-X"], 2024)
        assert exc.value.ship_id == "SHIP-X"
        assert pooling.list_pools() == []

    def test_wrong_year_has_no_record(self, pooling):
        with pytest.raises(ComplianceRecordNotFoundError):
            pooling.create_pool(["SHIP-A", "SHIP-B"], 2025)

    def test_net_negative_propagates(self, pooling):
        with pytest.raises(PoolNetNegativeError):
            pooling.create_pool(["SHIP-A", "SHIP-E"], 2024)
        assert pooling.list_pools() == []

    def test_single_member_propagates(self, pooling):
        with pytest.raises(InsufficientMembersError):
            pooling.create_pool(["SHIP-A"], 2024)

    def test_duplicate_ship_rejected(self, pooling):
        with pytest.raises(DuplicatePoolMemberError) as exc:
            pooling.create_pool(["SHIP-A", "SHIP-B", "SHIP-A"], 2024)
        assert exc.value.ship_id == "SHIP-A"

    def test_store_untouched_on_failure(self, db, ship_balances):
        pools = Mock(spec=PoolStore)
        service = PoolingService(SqlComplianceStore(db), pools)

        with pytest.raises(ComplianceRecordNotFoundError):
            service.create_pool(["SHIP-A", "MISSING"], 2024)
        with pytest.raises(PoolNetNegativeError):
            service.create_pool(["SHIP-A", "SHIP-E"], 2024)

        pools.create_pool.assert_not_called()

    def test_store_receives_allocation(self, db, ship_balances):
        pools = Mock(spec=PoolStore)
        service = PoolingService(SqlComplianceStore(db), pools)

        result = service.create_pool(["SHIP-A", "SHIP-B"], 2024)

        pools.create_pool.assert_called_once()
        pool, members = pools.create_pool.call_args.args
        assert pool.id == result.pool_id
        assert pool.created_at.tzinfo is not None
        assert list(members) == result.members


class TestReadPools:
    def test_get_unknown_pool(self, pooling):
        with pytest.raises(PoolNotFoundError) as exc:
            pooling.get_pool("00000000-0000-0000-0000-000000000000")
        assert exc.value.status == 404

    def test_list_filters_by_year(self, db, pooling):
        from src.compliance.records import ComplianceBalance

        SqlComplianceStore(db).save_all([
            ComplianceBalance("SHIP-A", 2025, 10.0),
            ComplianceBalance("SHIP-B", 2025, -5.0),
        ])
        pooling.create_pool(["SHIP-A", "SHIP-B"], 2024)
        pooling.create_pool(["SHIP-A", "SHIP-B"], 2025)

        assert len(pooling.list_pools()) == 2
        assert [p.pool.year for p in pooling.list_pools(2025)] == [2025]
