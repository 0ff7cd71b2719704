"""Schémas carburant / Fuel schemas (refuel events, sources, history rows)."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fleetdesk.models.fuel_source import SourceType


# --- Refuel events ---

class FuelEventCreate(BaseModel):
    vehicle_id: int
    refuel_at: str                      # YYYY-MM-DD ou YYYY-MM-DDTHH:MM
    odometer_km: float = Field(ge=0)
    liters: float = Field(gt=0)
    amount: float = Field(ge=0)
    source_type: SourceType = SourceType.CARD
    source_identifier: str = Field(min_length=1, max_length=50)


class FuelEventUpdate(BaseModel):
    refuel_at: str | None = None
    odometer_km: float | None = Field(None, ge=0)
    liters: float | None = Field(None, gt=0)
    amount: float | None = Field(None, ge=0)
    source_type: SourceType | None = None
    source_identifier: str | None = Field(None, min_length=1, max_length=50)


class FuelEventRead(BaseModel):
    id: int
    vehicle_id: int
    refuel_at: str
    odometer_km: float
    liters: float
    amount: float
    source_type: SourceType
    source_identifier: str
    created_at: str | None = None

    model_config = ConfigDict(from_attributes=True)


class FuelHistoryRow(BaseModel):
    """Plein avec metriques calculees / Refuel event with computed metrics."""
    id: int
    vehicle_id: int
    vehicle_code: str | None = None
    plate: str | None = None
    refuel_at: str
    odometer_km: float
    liters: float
    amount: float
    source_type: str
    source_identifier: str
    previous_event_id: int | None = None
    distance_km: float | None = None
    km_per_liter: float | None = None
    liters_per_100km: float | None = None


# --- Fuel sources ---

class FuelSourceCreate(BaseModel):
    source_type: SourceType
    identifier: str = Field(min_length=1, max_length=50)
    active: bool = True


class FuelSourceUpdate(BaseModel):
    active: bool | None = None

    @field_validator("active")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("active cannot be null")
        return value


class FuelSourceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    source_type: SourceType
    identifier: str
    active: bool
