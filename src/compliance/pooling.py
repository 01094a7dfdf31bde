"""
FuelEU Maritime Article 21 compliance pooling.

Greedy allocation of surplus compliance balance to deficit ships:

1. Split ships into surplus (CB > 0), deficit (CB < 0) and zero groups
2. Sort surplus largest-first and deficit by largest need first
   (stable: equal amounts keep their input order)
3. For each deficit ship, pull from the current surplus ship until the
   need is met, advancing to the next surplus ship when one is drained

Invariants of the result:
- Surplus ship never exits negative: cb_after >= 0
- Deficit ship never exits worse: cb_after >= cb_before
- Zero ship is untouched
- Total CB is conserved: sum(cb_before) == sum(cb_after)

The allocation is not proportional; it is first-come by sort order.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence

from .errors import (
    AllocationInvariantError,
    InsufficientMembersError,
    PoolNetNegativeError,
)
from .records import PoolMember

logger = logging.getLogger(__name__)

MIN_POOL_MEMBERS = 2

# Conservation tolerance for float CB sums
REL_TOLERANCE = 1e-9
ABS_TOLERANCE = 1e-6


@dataclass(frozen=True)
class ShipBalance:
    """Allocator input: a ship and its compliance balance."""
    ship_id: str
    cb_gco2eq: float


@dataclass
class AllocationResult:
    members: List[PoolMember] = field(default_factory=list)
    total_surplus_before: float = 0.0
    total_deficit_before: float = 0.0  # sum of negative CBs (<= 0)
    net_cb: float = 0.0


class _Working:
    """Mutable per-ship running totals, private to one allocation."""

    __slots__ = ("ship", "remaining", "need", "received")

    def __init__(self, ship: ShipBalance):
        self.ship = ship
        self.remaining = ship.cb_gco2eq if ship.cb_gco2eq > 0 else 0.0
        self.need = -ship.cb_gco2eq if ship.cb_gco2eq < 0 else 0.0
        self.received = 0.0


def allocate_pool(pool_id: str, ships: Sequence[ShipBalance]) -> AllocationResult:
    """
    Run the greedy pool allocation.

    Args:
        pool_id: Pool the resulting members belong to
        ships: Ship balances to pool (at least two)

    Returns:
        AllocationResult with cb_before/cb_after per member, surplus ships
        first, then deficit ships, then zero ships

    Raises:
        InsufficientMembersError: fewer than two ships
        PoolNetNegativeError: aggregate CB below zero
    """
    if len(ships) < MIN_POOL_MEMBERS:
        raise InsufficientMembersError(len(ships))

    net_cb = math.fsum(s.cb_gco2eq for s in ships)
    if net_cb < 0:
        raise PoolNetNegativeError(net_cb)

    # sorted() is stable, so ties keep input order
    surplus = sorted(
        (_Working(s) for s in ships if s.cb_gco2eq > 0),
        key=lambda w: w.remaining,
        reverse=True,
    )
    deficit = sorted(
        (_Working(s) for s in ships if s.cb_gco2eq < 0),
        key=lambda w: w.need,
        reverse=True,
    )
    zero = [s for s in ships if s.cb_gco2eq == 0]

    cursor = 0
    for d in deficit:
        while d.received < d.need and cursor < len(surplus):
            giver = surplus[cursor]
            transfer = min(giver.remaining, d.need - d.received)
            if transfer <= 0:
                break
            giver.remaining -= transfer
            d.received += transfer
            if giver.remaining <= 0:
                giver.remaining = 0.0
                cursor += 1

    members = [
        PoolMember(pool_id, w.ship.ship_id, w.ship.cb_gco2eq, w.remaining)
        for w in surplus
    ]
    members.extend(
        PoolMember(pool_id, w.ship.ship_id, w.ship.cb_gco2eq, w.ship.cb_gco2eq + w.received)
        for w in deficit
    )
    members.extend(PoolMember(pool_id, s.ship_id, 0.0, 0.0) for s in zero)

    result = AllocationResult(
        members=members,
        total_surplus_before=math.fsum(w.ship.cb_gco2eq for w in surplus),
        total_deficit_before=math.fsum(w.ship.cb_gco2eq for w in deficit),
        net_cb=net_cb,
    )

    logger.debug(
        "Allocated pool %s: %d surplus, %d deficit, %d zero, net %.2f",
        pool_id, len(surplus), len(deficit), len(zero), net_cb,
    )
    return result


def verify_allocation(
    members: Sequence[PoolMember],
    rel_tol: float = REL_TOLERANCE,
    abs_tol: float = ABS_TOLERANCE,
) -> None:
    """
    Check per-member bounds and conservation of an allocation.

    Raises:
        AllocationInvariantError: on the first violated invariant
    """
    for m in members:
        if m.cb_before > 0 and m.cb_after < 0:
            raise AllocationInvariantError(
                f"surplus ship {m.ship_id} exits negative ({m.cb_after})"
            )
        if m.cb_before < 0 and m.cb_after < m.cb_before:
            raise AllocationInvariantError(
                f"deficit ship {m.ship_id} exits worse ({m.cb_before} -> {m.cb_after})"
            )
        if m.cb_before == 0 and m.cb_after != 0:
            raise AllocationInvariantError(
                f"zero ship {m.ship_id} was modified ({m.cb_after})"
            )

    before = math.fsum(m.cb_before for m in members)
    after = math.fsum(m.cb_after for m in members)
    if not math.isclose(before, after, rel_tol=rel_tol, abs_tol=abs_tol):
        raise AllocationInvariantError(
            f"total CB not conserved ({before} -> {after})"
        )
