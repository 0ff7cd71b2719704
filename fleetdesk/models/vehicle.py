"""Modele Vehicule / Vehicle model.

Entite physique du parc. Seul le flag `active` interesse les calculs de
consommation, qui traitent les vehicules inactifs comme les actifs.
Physical fleet asset; fuel analytics treat inactive vehicles like active ones.
"""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class Vehicle(Base):
    """Vehicule du parc / Fleet vehicle."""
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    plate: Mapped[str] = mapped_column(String(20), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[str | None] = mapped_column(String(32))  # ISO 8601

    # Relations
    fuel_events: Mapped[list["FuelEvent"]] = relationship(
        back_populates="vehicle", passive_deletes=True
    )
    deadlines: Mapped[list["VehicleDeadline"]] = relationship(
        back_populates="vehicle", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Vehicle {self.code} - {self.plate}>"
