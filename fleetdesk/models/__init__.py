"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour qu'ils soient enregistrés sur Base.metadata.
Import all models here so they are registered on Base.metadata.
"""

from fleetdesk.models.vehicle import Vehicle
from fleetdesk.models.fuel_source import FuelSource, SourceType
from fleetdesk.models.fuel_event import FuelEvent
from fleetdesk.models.deadline import DeadlineType, VehicleDeadline

__all__ = [
    "Vehicle",
    "FuelSource",
    "SourceType",
    "FuelEvent",
    "DeadlineType",
    "VehicleDeadline",
]
