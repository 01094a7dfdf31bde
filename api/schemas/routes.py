"""Route and baseline comparison API schemas."""

from pydantic import BaseModel


class RouteResponse(BaseModel):
    """Voyage route record."""
    route_id: str
    vessel_type: str
    fuel_type: str
    year: int
    ghg_intensity: float
    fuel_consumption: float
    distance: float
    total_emissions: float
    is_baseline: bool


class BaselineResponse(BaseModel):
    status: str
    route_id: str


class ComparisonResponse(BaseModel):
    """Baseline vs alternative route deltas."""
    baseline_route_id: str
    alternative_route_id: str
    baseline_ghg_intensity: float
    alternative_ghg_intensity: float
    delta_ghg_intensity: float
    baseline_cb: float
    alternative_cb: float
    delta_cb: float
    percentage_savings: float
    compliant: bool
