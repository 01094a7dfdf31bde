"""
Domain errors for FuelEU compliance, banking and pooling.

Every error carries a stable ``code`` and a ``status`` hint that the HTTP
boundary uses to build its response. Services raise these at the point of
violation and never translate one into another.
"""


class DomainError(Exception):
    """Base class for business-rule violations."""

    code = "DOMAIN_ERROR"
    status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RouteNotFoundError(DomainError):
    code = "ROUTE_NOT_FOUND"
    status = 404

    def __init__(self, route_id: str):
        super().__init__(f"Route not found: {route_id}")
        self.route_id = route_id


class NoBaselineSetError(DomainError):
    code = "NO_BASELINE_SET"

    def __init__(self):
        super().__init__("No baseline route has been set")


class ComplianceRecordNotFoundError(DomainError):
    code = "NO_COMPLIANCE_RECORD"
    status = 404

    def __init__(self, ship_id: str, year: int):
        super().__init__(f"No compliance record for ship {ship_id} year {year}")
        self.ship_id = ship_id
        self.year = year


class InvalidAmountError(DomainError):
    code = "INVALID_AMOUNT"

    def __init__(self, amount: float):
        super().__init__(f"Invalid amount: {amount}. Must be > 0")
        self.amount = amount


class InsufficientSurplusError(DomainError):
    """Banking more than the available surplus, or from a non-surplus ship."""

    code = "INSUFFICIENT_SURPLUS"

    def __init__(self, ship_id: str):
        super().__init__(f"Ship {ship_id} has insufficient surplus to bank")
        self.ship_id = ship_id


class InsufficientBankedError(DomainError):
    code = "INSUFFICIENT_BANKED_AMOUNT"

    def __init__(self, ship_id: str, requested: float, available: float):
        super().__init__(
            f"Ship {ship_id}: requested {requested} but only {available} banked"
        )
        self.ship_id = ship_id
        self.requested = requested
        self.available = available


class InsufficientMembersError(DomainError):
    code = "INSUFFICIENT_MEMBERS"

    def __init__(self, count: int):
        super().__init__(f"Pool requires at least 2 members, got {count}")
        self.count = count


class PoolNetNegativeError(DomainError):
    code = "POOL_NET_NEGATIVE"

    def __init__(self, net_cb: float):
        super().__init__(f"Pool net CB is negative: {net_cb}. Sum must be >= 0")
        self.net_cb = net_cb


class DuplicatePoolMemberError(DomainError):
    code = "DUPLICATE_POOL_MEMBER"

    def __init__(self, ship_id: str):
        super().__init__(f"Ship {ship_id} listed more than once in pool request")
        self.ship_id = ship_id


class AllocationInvariantError(DomainError):
    """Allocation output broke conservation or a per-member bound."""

    code = "ALLOCATION_INVARIANT_VIOLATED"
    status = 500

    def __init__(self, detail: str):
        super().__init__(f"Pool allocation invariant violated: {detail}")
        self.detail = detail


class PoolNotFoundError(DomainError):
    code = "POOL_NOT_FOUND"
    status = 404

    def __init__(self, pool_id: str):
        super().__init__(f"Pool not found: {pool_id}")
        self.pool_id = pool_id
