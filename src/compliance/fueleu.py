"""
FuelEU Maritime (EU 2023/1805) Compliance Balance Calculator.

Implements the simplified Annex IV compliance balance:
- Energy in scope from fuel mass (fixed 41 000 MJ/t factor)
- Compliance balance (surplus/deficit vs the 2025 GHG intensity target)
- Baseline vs alternative route comparison

Reference: EU Regulation 2023/1805 (FuelEU Maritime)
Target: 89.3368 gCO2eq/MJ (2% below the 91.16 reference)
"""

import logging
from dataclasses import dataclass

from .records import Route

logger = logging.getLogger(__name__)


# =============================================================================
# Regulatory constants
# =============================================================================

REFERENCE_GHG = 91.16  # gCO2eq/MJ (2020 baseline)
TARGET_INTENSITY = 89.3368  # gCO2eq/MJ, 2025 limit
ENERGY_FACTOR = 41_000  # MJ per tonne of fuel


# =============================================================================
# Calculator
# =============================================================================

def compute_energy(fuel_consumption_t: float) -> float:
    """Energy in scope (MJ) for a fuel mass in tonnes."""
    return fuel_consumption_t * ENERGY_FACTOR


def compute_compliance_balance(
    actual_ghg_intensity: float, fuel_consumption_t: float
) -> float:
    """
    Compliance balance in gCO2eq.

    CB = (target - actual) * energy. Positive means the ship beats the target
    (surplus), negative means deficit. Inputs are not validated; NaN or
    negative values propagate arithmetically.

    Args:
        actual_ghg_intensity: Attained GHG intensity (gCO2eq/MJ)
        fuel_consumption_t: Fuel consumed (tonnes)

    Returns:
        Signed compliance balance (gCO2eq)
    """
    energy = compute_energy(fuel_consumption_t)
    return (TARGET_INTENSITY - actual_ghg_intensity) * energy


def balance_status(cb_gco2eq: float) -> str:
    """Classify a balance as surplus, deficit or neutral."""
    if cb_gco2eq > 0:
        return "surplus"
    if cb_gco2eq < 0:
        return "deficit"
    return "neutral"


# =============================================================================
# Route comparison
# =============================================================================

@dataclass
class RouteComparison:
    """Baseline vs alternative route deltas."""
    baseline_route_id: str
    alternative_route_id: str
    baseline_ghg_intensity: float
    alternative_ghg_intensity: float
    delta_ghg_intensity: float  # baseline - alternative (positive = better)
    baseline_cb: float
    alternative_cb: float
    delta_cb: float  # alternative - baseline (positive = better)
    percentage_savings: float
    compliant: bool  # alternative meets the target


def compare_routes(baseline: Route, alternative: Route) -> RouteComparison:
    """
    Compare an alternative route against the baseline.

    Percentage savings are relative to the baseline intensity and are zero
    when the baseline intensity is zero.
    """
    baseline_cb = compute_compliance_balance(
        baseline.ghg_intensity, baseline.fuel_consumption
    )
    alternative_cb = compute_compliance_balance(
        alternative.ghg_intensity, alternative.fuel_consumption
    )

    delta_intensity = baseline.ghg_intensity - alternative.ghg_intensity
    if baseline.ghg_intensity == 0:
        savings = 0.0
    else:
        savings = delta_intensity / baseline.ghg_intensity * 100

    return RouteComparison(
        baseline_route_id=baseline.route_id,
        alternative_route_id=alternative.route_id,
        baseline_ghg_intensity=baseline.ghg_intensity,
        alternative_ghg_intensity=alternative.ghg_intensity,
        delta_ghg_intensity=delta_intensity,
        baseline_cb=baseline_cb,
        alternative_cb=alternative_cb,
        delta_cb=alternative_cb - baseline_cb,
        percentage_savings=savings,
        compliant=alternative.ghg_intensity <= TARGET_INTENSITY,
    )
