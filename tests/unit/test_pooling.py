"""
Unit tests for the greedy pool allocator.

Covers validation, per-member bounds, conservation, sort order and the
verification pass over an allocation.
"""

import math
import random

import pytest

from src.compliance.errors import (
    AllocationInvariantError,
    InsufficientMembersError,
    PoolNetNegativeError,
)
from src.compliance.pooling import ShipBalance, allocate_pool, verify_allocation
from src.compliance.records import PoolMember


def _ships(*pairs):
    return [ShipBalance(ship_id, cb) for ship_id, cb in pairs]


def _by_ship(result):
    return {m.ship_id: m for m in result.members}


# ============================================================================
# Validation
# ============================================================================


class TestValidation:
    def test_empty_pool_rejected(self):
        with pytest.raises(InsufficientMembersError) as exc:
            allocate_pool("p1", [])
        assert exc.value.count == 0

    def test_single_member_rejected(self):
        with pytest.raises(InsufficientMembersError) as exc:
            allocate_pool("p1", _ships(("A", 100.0)))
        assert exc.value.count == 1
        assert exc.value.code == "INSUFFICIENT_MEMBERS"

    def test_negative_net_rejected(self):
        with pytest.raises(PoolNetNegativeError) as exc:
            allocate_pool("p1", _ships(("A", 100.0), ("B", -150.0)))
        assert exc.value.net_cb == pytest.approx(-50.0)
        assert exc.value.code == "POOL_NET_NEGATIVE"

    def test_member_count_checked_before_net(self):
        """A single deficit ship reports the member count, not the net."""
        with pytest.raises(InsufficientMembersError):
            allocate_pool("p1", _ships(("A", -100.0)))

    def test_zero_net_accepted(self):
        result = allocate_pool("p1", _ships(("A", 100.0), ("B", -100.0)))
        assert result.net_cb == 0.0
        members = _by_ship(result)
        assert members["A"].cb_after == 0.0
        assert members["B"].cb_after == 0.0


# ============================================================================
# Allocation outcomes
# ============================================================================


class TestAllocation:
    def test_one_surplus_covers_two_deficits(self):
        result = allocate_pool("p1", _ships(("A", 500.0), ("B", -200.0), ("C", -100.0)))
        members = _by_ship(result)

        assert members["A"].cb_after == pytest.approx(200.0)
        assert members["B"].cb_after == pytest.approx(0.0)
        assert members["C"].cb_after == pytest.approx(0.0)
        assert result.net_cb == pytest.approx(200.0)
        assert result.total_surplus_before == pytest.approx(500.0)
        assert result.total_deficit_before == pytest.approx(-300.0)

    def test_largest_surplus_drained_first(self):
        """Ordering is by magnitude: S1 (300) gives before S2 (200)."""
        result = allocate_pool(
            "p1", _ships(("S2", 200.0), ("S1", 300.0), ("D", -350.0))
        )
        members = _by_ship(result)
        assert members["S1"].cb_after == 0.0
        assert members["S2"].cb_after == pytest.approx(150.0)
        assert members["D"].cb_after == pytest.approx(0.0)

    def test_largest_deficit_served_first(self):
        """The biggest need is filled first, draining donors in order."""
        result = allocate_pool(
            "p1", _ships(("S", 250.0), ("D1", -100.0), ("D2", -200.0), ("T", 50.0))
        )
        members = _by_ship(result)
        # Surplus order: S (250), T (50); deficit order: D2 (200), D1 (100)
        assert members["D2"].cb_after == pytest.approx(0.0)
        assert members["D1"].cb_after == pytest.approx(0.0)
        assert members["S"].cb_after == pytest.approx(0.0)
        assert members["T"].cb_after == pytest.approx(0.0)

    def test_zero_ship_untouched(self):
        result = allocate_pool("p1", _ships(("A", 100.0), ("Z", 0.0), ("B", -40.0)))
        z = _by_ship(result)["Z"]
        assert z.cb_before == 0.0
        assert z.cb_after == 0.0

    def test_all_zero_pool(self):
        result = allocate_pool("p1", _ships(("A", 0.0), ("B", 0.0)))
        assert [(m.cb_before, m.cb_after) for m in result.members] == [(0.0, 0.0), (0.0, 0.0)]
        assert result.net_cb == 0.0

    def test_all_surplus_pool_unchanged(self):
        result = allocate_pool("p1", _ships(("A", 10.0), ("B", 20.0)))
        for m in result.members:
            assert m.cb_after == m.cb_before

    def test_member_order_surplus_deficit_zero(self):
        result = allocate_pool(
            "p1",
            _ships(("Z", 0.0), ("D", -10.0), ("S1", 5.0), ("S2", 50.0)),
        )
        assert [m.ship_id for m in result.members] == ["S2", "S1", "D", "Z"]

    def test_members_carry_pool_id(self):
        result = allocate_pool("pool-42", _ships(("A", 10.0), ("B", -5.0)))
        assert all(m.pool_id == "pool-42" for m in result.members)

    def test_equal_surplus_keeps_input_order(self):
        """Ties are broken by input order: the first-listed donor gives first."""
        result = allocate_pool(
            "p1", _ships(("X", 100.0), ("Y", 100.0), ("D", -60.0))
        )
        members = _by_ship(result)
        assert members["X"].cb_after == pytest.approx(40.0)
        assert members["Y"].cb_after == pytest.approx(100.0)

        reversed_result = allocate_pool(
            "p1", _ships(("Y", 100.0), ("X", 100.0), ("D", -60.0))
        )
        members = _by_ship(reversed_result)
        assert members["Y"].cb_after == pytest.approx(40.0)
        assert members["X"].cb_after == pytest.approx(100.0)

    def test_equal_deficit_keeps_input_order(self):
        result = allocate_pool(
            "p1", _ships(("S", 250.0), ("D2", -100.0), ("D1", -100.0))
        )
        assert [m.ship_id for m in result.members] == ["S", "D2", "D1"]
        assert all(m.cb_after == pytest.approx(0.0) for m in result.members if m.cb_before < 0)

    def test_input_not_mutated(self):
        ships = _ships(("A", 100.0), ("B", -50.0))
        snapshot = list(ships)
        allocate_pool("p1", ships)
        assert ships == snapshot

    def test_large_magnitudes(self):
        """Seed-scale balances (hundreds of millions gCO2eq) still conserve."""
        ships = _ships(
            ("R002", 263_082_240.0),
            ("R004", 27_483_120.0),
            ("R001", -240_956_000.0),
        )
        result = allocate_pool("p1", ships)
        verify_allocation(result.members)
        assert math.fsum(m.cb_after for m in result.members) == pytest.approx(result.net_cb)


# ============================================================================
# Properties over random pools
# ============================================================================


class TestAllocationProperties:
    @pytest.mark.parametrize("seed", range(25))
    def test_random_pools_hold_invariants(self, seed):
        rng = random.Random(seed)
        n = rng.randint(2, 12)
        ships = [
            ShipBalance(f"S{i}", rng.choice([0.0, rng.uniform(-1e8, 1e8)]))
            for i in range(n)
        ]
        total = math.fsum(s.cb_gco2eq for s in ships)
        if total < 0:
            # Top up the first ship so the pool is feasible
            first = ships[0]
            ships[0] = ShipBalance(first.ship_id, first.cb_gco2eq - total + rng.uniform(0, 1e6))

        result = allocate_pool("p", ships)

        assert len(result.members) == len(ships)
        assert {m.ship_id for m in result.members} == {s.ship_id for s in ships}
        for m in result.members:
            if m.cb_before > 0:
                assert m.cb_after >= 0
                assert m.cb_after <= m.cb_before
            elif m.cb_before < 0:
                assert m.cb_after >= m.cb_before
                assert m.cb_after <= 0 or m.cb_after == pytest.approx(0.0, abs=1e-6)
            else:
                assert m.cb_after == 0.0

        before = math.fsum(m.cb_before for m in result.members)
        after = math.fsum(m.cb_after for m in result.members)
        assert math.isclose(before, after, rel_tol=1e-9, abs_tol=1e-6)
        verify_allocation(result.members)

    @pytest.mark.parametrize("seed", range(10))
    def test_deficits_fully_covered_when_surplus_suffices(self, seed):
        """Net >= 0 means total surplus covers total need, so no deficit remains."""
        rng = random.Random(1000 + seed)
        deficits = [-rng.uniform(1, 1000) for _ in range(rng.randint(1, 5))]
        need = -math.fsum(deficits)
        surpluses = [need * 0.6, need * 0.4 + rng.uniform(0, 10)]
        ships = _ships(
            *[(f"D{i}", d) for i, d in enumerate(deficits)],
            *[(f"S{i}", s) for i, s in enumerate(surpluses)],
        )

        result = allocate_pool("p", ships)
        for m in result.members:
            if m.cb_before < 0:
                assert m.cb_after == pytest.approx(0.0, abs=1e-6)


# ============================================================================
# verify_allocation
# ============================================================================


class TestVerifyAllocation:
    def test_valid_allocation_passes(self):
        verify_allocation([
            PoolMember("p", "A", 100.0, 40.0),
            PoolMember("p", "B", -60.0, 0.0),
            PoolMember("p", "Z", 0.0, 0.0),
        ])

    def test_surplus_exiting_negative(self):
        with pytest.raises(AllocationInvariantError, match="exits negative"):
            verify_allocation([
                PoolMember("p", "A", 100.0, -10.0),
                PoolMember("p", "B", -60.0, 50.0),
            ])

    def test_deficit_exiting_worse(self):
        with pytest.raises(AllocationInvariantError, match="exits worse"):
            verify_allocation([
                PoolMember("p", "A", 100.0, 110.0),
                PoolMember("p", "B", -60.0, -70.0),
            ])

    def test_zero_ship_modified(self):
        with pytest.raises(AllocationInvariantError, match="zero ship"):
            verify_allocation([
                PoolMember("p", "A", 100.0, 90.0),
                PoolMember("p", "Z", 0.0, 10.0),
            ])

    def test_conservation_broken(self):
        with pytest.raises(AllocationInvariantError, match="not conserved") as exc:
            verify_allocation([
                PoolMember("p", "A", 100.0, 50.0),
                PoolMember("p", "B", -60.0, 0.0),
            ])
        assert exc.value.status == 500
        assert exc.value.code == "ALLOCATION_INVARIANT_VIOLATED"

    def test_float_noise_tolerated(self):
        verify_allocation([
            PoolMember("p", "A", 0.1 + 0.2, 0.0),
            PoolMember("p", "B", -0.3, 0.0),
        ])
