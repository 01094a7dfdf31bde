"""Sample voyage routes (R001 is the baseline)."""

from typing import List

from .records import FuelType, Route, VesselType


def build_route_seed() -> List[Route]:
    return [
        Route("R001", VesselType.CONTAINER, FuelType.HFO, 2024,
              ghg_intensity=91.0, fuel_consumption=5000, distance=12000,
              total_emissions=4500, is_baseline=True),
        Route("R002", VesselType.BULK_CARRIER, FuelType.LNG, 2024,
              ghg_intensity=88.0, fuel_consumption=4800, distance=11500,
              total_emissions=4200),
        Route("R003", VesselType.TANKER, FuelType.MGO, 2024,
              ghg_intensity=93.5, fuel_consumption=5100, distance=12500,
              total_emissions=4700),
        Route("R004", VesselType.RORO, FuelType.HFO, 2025,
              ghg_intensity=89.2, fuel_consumption=4900, distance=11800,
              total_emissions=4300),
        Route("R005", VesselType.CONTAINER, FuelType.LNG, 2025,
              ghg_intensity=90.5, fuel_consumption=4950, distance=11900,
              total_emissions=4400),
    ]
