"""Schémas Véhicule / Vehicle schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VehicleBase(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    plate: str = Field(min_length=1, max_length=20)
    model: str = Field(min_length=1, max_length=100)
    description: str | None = None
    active: bool = True


class VehicleCreate(VehicleBase):
    pass


class VehicleUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=20)
    plate: str | None = Field(None, min_length=1, max_length=20)
    model: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    active: bool | None = None

    @field_validator("code", "plate", "model", "active")
    @classmethod
    def _not_null(cls, value):
        # Omettre le champ pour le conserver / Omit the field to keep it unchanged
        if value is None:
            raise ValueError("field cannot be null")
        return value


class VehicleStatusUpdate(BaseModel):
    active: bool


class VehicleRead(VehicleBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: str | None = None
