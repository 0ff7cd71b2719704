"""Schémas échéances / Deadline schemas."""

from datetime import date

from pydantic import BaseModel, field_validator

from fleetdesk.models.deadline import DeadlineType
from fleetdesk.services.deadline_classifier import DeadlineState


class DeadlineUpsert(BaseModel):
    """Une date par type ; vide ou null supprime / One date per type; empty or null clears it."""
    ROAD_TAX: date | None = None
    INSPECTION: date | None = None
    INSURANCE: date | None = None
    TACHOGRAPH: date | None = None
    CRANE_INSPECTION: date | None = None
    STRUCTURAL: date | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class DeadlineStatusRead(BaseModel):
    vehicle_id: int
    vehicle_code: str | None = None
    plate: str | None = None
    deadline_type: DeadlineType
    due_date: date | None = None
    state: DeadlineState
    days_left: int | None = None


class DeadlineSummaryRead(BaseModel):
    valid: int
    warning: int
    expired: int
    unset: int
    total: int
    generated_at: str


class DeadlineAlertsRead(BaseModel):
    window_days: int
    count: int
    generated_at: str
    data: list[DeadlineStatusRead]
