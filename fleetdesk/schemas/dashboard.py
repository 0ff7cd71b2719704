"""Schémas tableau de bord carburant / Fuel dashboard schemas."""

from pydantic import BaseModel


class VehicleConsumptionItem(BaseModel):
    vehicle_id: int
    vehicle_code: str | None = None
    plate: str | None = None
    model: str | None = None
    avg_km_per_liter: float
    avg_liters_per_100km: float
    samples: int
    total_liters: float
    total_distance_km: float


class MonthlyBucketItem(BaseModel):
    month: str          # YYYY-MM
    liters: float
    amount: float
    distance_km: float


class FuelDashboardResponse(BaseModel):
    date_from: str | None = None
    date_to: str | None = None
    total_liters: float
    total_amount: float
    total_distance_km: float
    avg_consumption_km_l: float | None = None
    event_count: int
    top_consumers: list[VehicleConsumptionItem]
    monthly_series: list[MonthlyBucketItem]
    vehicle_comparison: list[VehicleConsumptionItem]
