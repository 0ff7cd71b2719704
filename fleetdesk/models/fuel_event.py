"""Modele plein carburant / Refuel event model."""

from sqlalchemy import Enum, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base
from fleetdesk.models.fuel_source import SourceType


class FuelEvent(Base):
    """Plein carburant / Refuel event.

    `refuel_at` est saisi par l'utilisateur (ni unique, ni monotone).
    `refuel_at` is caller-supplied: neither unique nor monotonic on insert.
    """
    __tablename__ = "fuel_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id"), nullable=False, index=True)
    refuel_at: Mapped[str] = mapped_column(String(16), nullable=False)  # YYYY-MM-DDTHH:MM
    odometer_km: Mapped[float] = mapped_column(Float, nullable=False)
    liters: Mapped[float] = mapped_column(Float, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    source_type: Mapped[SourceType] = mapped_column(
        Enum(SourceType, values_callable=lambda e: [m.value for m in e]), nullable=False
    )
    source_identifier: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[str | None] = mapped_column(String(32))  # ISO 8601

    # Relations
    vehicle: Mapped["Vehicle"] = relationship(back_populates="fuel_events")

    def __repr__(self) -> str:
        return f"<FuelEvent {self.refuel_at} - {self.liters}L - vehicle {self.vehicle_id}>"
