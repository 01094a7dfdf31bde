"""Compliance module for FuelEU Maritime balances, banking and pooling."""

from .fueleu import compute_compliance_balance, compute_energy
from .pooling import ShipBalance, allocate_pool

__all__ = ["compute_compliance_balance", "compute_energy", "ShipBalance", "allocate_pool"]
