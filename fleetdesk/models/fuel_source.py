"""Modele source carburant / Fuel source model (card or tank)."""

import enum

from sqlalchemy import Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from fleetdesk.database import Base


class SourceType(str, enum.Enum):
    """Type de source / Fueling source type."""
    CARD = "card"
    TANK = "tank"


class FuelSource(Base):
    """Carte carburant ou cuve / Fuel card or depot tank."""
    __tablename__ = "fuel_sources"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    source_type: Mapped[SourceType] = mapped_column(
        Enum(SourceType, values_callable=lambda e: [m.value for m in e]), nullable=False
    )
    identifier: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[str | None] = mapped_column(String(32))  # ISO 8601

    def __repr__(self) -> str:
        return f"<FuelSource {self.source_type.value}:{self.identifier}>"
