"""Modele echeance vehicule / Vehicle deadline model."""

import enum

from sqlalchemy import Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class DeadlineType(str, enum.Enum):
    """Type d'echeance / Deadline type."""
    ROAD_TAX = "ROAD_TAX"
    INSPECTION = "INSPECTION"
    INSURANCE = "INSURANCE"
    TACHOGRAPH = "TACHOGRAPH"
    CRANE_INSPECTION = "CRANE_INSPECTION"
    STRUCTURAL = "STRUCTURAL"


class VehicleDeadline(Base):
    """Une date d'echeance par (vehicule, type) / One due date per (vehicle, type)."""
    __tablename__ = "vehicle_deadlines"
    __table_args__ = (UniqueConstraint("vehicle_id", "deadline_type", name="uq_vehicle_deadline_type"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id"), nullable=False)
    deadline_type: Mapped[DeadlineType] = mapped_column(Enum(DeadlineType), nullable=False)
    due_date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD

    # Relations
    vehicle: Mapped["Vehicle"] = relationship(back_populates="deadlines")

    def __repr__(self) -> str:
        return f"<Deadline {self.deadline_type.value} {self.due_date} - vehicle {self.vehicle_id}>"
