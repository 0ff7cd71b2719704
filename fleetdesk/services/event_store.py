"""
Stockage des pleins et echeances / Refuel and deadline store.
Adaptateur async SQLAlchemy : fournit des instantanes non ordonnes au coeur
de calcul et protege l'invariant kilometrique a l'ecriture.
Async SQLAlchemy adapter: serves unordered snapshots to the analytics core and
guards the odometer invariant on writes.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.models.deadline import DeadlineType, VehicleDeadline
from fleetdesk.models.fuel_event import FuelEvent
from fleetdesk.models.fuel_source import SourceType
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.services.sequencer import RefuelEvent, find_neighbors
from fleetdesk.utils.dates import (
    DateWindow,
    format_refuel_at,
    normalize_refuel_at,
    parse_due_date,
    parse_refuel_at,
)

log = logging.getLogger(__name__)


class EventNotFoundError(LookupError):
    """Entite absente / Missing entity."""


class InvalidRefuelTimestampError(ValueError):
    """Horodatage de plein non reconnu / Unrecognised refuel timestamp."""


class OdometerSequenceError(ValueError):
    """Kilometrage incoherent avec les pleins voisins / Odometer out of order with neighbours."""

    def __init__(self, message: str, neighbor_km: float):
        super().__init__(message)
        self.neighbor_km = neighbor_km


@dataclass(frozen=True)
class DeadlineRecord:
    """Echeance avec identite vehicule / Deadline with vehicle identity."""
    vehicle_id: int
    vehicle_code: str
    plate: str
    deadline_type: DeadlineType
    due_date: date


def to_refuel_event(entry: FuelEvent) -> RefuelEvent:
    return RefuelEvent(
        id=entry.id,
        vehicle_id=entry.vehicle_id,
        refuel_at=parse_refuel_at(entry.refuel_at),
        odometer_km=float(entry.odometer_km),
        liters=float(entry.liters),
        amount=float(entry.amount or 0),
        source_type=entry.source_type.value if isinstance(entry.source_type, SourceType) else str(entry.source_type),
        source_identifier=entry.source_identifier,
    )


class EventStore:
    """Acces lecture/ecriture aux pleins / Read/write access to refuel events."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lecture / Read ───

    async def get_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = await self.db.get(Vehicle, vehicle_id)
        if vehicle is None:
            raise EventNotFoundError(f"Vehicle {vehicle_id} not found")
        return vehicle

    async def list_vehicles(self, active_only: bool = False) -> list[Vehicle]:
        query = select(Vehicle).order_by(Vehicle.code)
        if active_only:
            query = query.where(Vehicle.active.is_(True))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_events(
        self,
        vehicle_id: int | None = None,
        window: DateWindow | None = None,
    ) -> list[RefuelEvent]:
        """Instantane non ordonne / Unordered snapshot, window bounds inclusive."""
        query = select(FuelEvent)
        if vehicle_id is not None:
            query = query.where(FuelEvent.vehicle_id == vehicle_id)
        if window is not None and window.date_from is not None:
            query = query.where(FuelEvent.refuel_at >= format_refuel_at(window.date_from))
        if window is not None and window.date_to is not None:
            query = query.where(FuelEvent.refuel_at <= format_refuel_at(window.date_to))
        result = await self.db.execute(query)

        events = []
        for entry in result.scalars().all():
            try:
                events.append(to_refuel_event(entry))
            except ValueError:
                log.warning("Skipping fuel event %s with unparseable refuel_at %r", entry.id, entry.refuel_at)
        return events

    async def list_deadlines(self, vehicle_id: int | None = None, active_only: bool = False) -> list[DeadlineRecord]:
        query = (
            select(VehicleDeadline, Vehicle)
            .join(Vehicle, Vehicle.id == VehicleDeadline.vehicle_id)
            .order_by(VehicleDeadline.due_date, Vehicle.code)
        )
        if vehicle_id is not None:
            query = query.where(VehicleDeadline.vehicle_id == vehicle_id)
        if active_only:
            query = query.where(Vehicle.active.is_(True))
        result = await self.db.execute(query)

        records = []
        for deadline, vehicle in result.all():
            try:
                due = parse_due_date(deadline.due_date)
            except ValueError:
                log.warning("Skipping deadline %s with unparseable due date %r", deadline.id, deadline.due_date)
                continue
            if due is None:
                continue
            records.append(DeadlineRecord(
                vehicle_id=vehicle.id,
                vehicle_code=vehicle.code,
                plate=vehicle.plate,
                deadline_type=deadline.deadline_type,
                due_date=due,
            ))
        return records

    # ─── Ecriture / Write ───

    async def _check_odometer(self, vehicle_id: int, refuel_at: str, odometer_km: float,
                              event_id: int | None = None) -> None:
        """Verifier l'ordre kilometrique / Check odometer against chronological neighbours."""
        events = await self.list_events(vehicle_id=vehicle_id)
        earlier, later = find_neighbors(events, parse_refuel_at(refuel_at), odometer_km, event_id)
        if earlier is not None and odometer_km < earlier.odometer_km:
            log.warning(
                "Rejected odometer %.0f for vehicle %s at %s: previous fill-up reads %.0f",
                odometer_km, vehicle_id, refuel_at, earlier.odometer_km,
            )
            raise OdometerSequenceError(
                f"Odometer cannot be lower than the previous fill-up ({earlier.odometer_km:.0f} km)",
                earlier.odometer_km,
            )
        if later is not None and odometer_km > later.odometer_km:
            log.warning(
                "Rejected odometer %.0f for vehicle %s at %s: next fill-up reads %.0f",
                odometer_km, vehicle_id, refuel_at, later.odometer_km,
            )
            raise OdometerSequenceError(
                f"Odometer cannot exceed the next fill-up ({later.odometer_km:.0f} km)",
                later.odometer_km,
            )

    @staticmethod
    def _normalize(values: dict[str, Any]) -> dict[str, Any]:
        if "refuel_at" in values:
            normalized = normalize_refuel_at(values["refuel_at"])
            if normalized is None:
                raise InvalidRefuelTimestampError(f"Invalid refuel timestamp: {values['refuel_at']!r}")
            values["refuel_at"] = normalized
        if "source_identifier" in values and values["source_identifier"] is not None:
            values["source_identifier"] = values["source_identifier"].strip().upper()
        return values

    async def get_event(self, event_id: int) -> FuelEvent:
        entry = await self.db.get(FuelEvent, event_id)
        if entry is None:
            raise EventNotFoundError(f"Fuel event {event_id} not found")
        return entry

    async def create_event(self, values: dict[str, Any]) -> FuelEvent:
        values = self._normalize(dict(values))
        await self.get_vehicle(values["vehicle_id"])
        await self._check_odometer(values["vehicle_id"], values["refuel_at"], values["odometer_km"])

        values["created_at"] = datetime.now(timezone.utc).isoformat(timespec="seconds")
        entry = FuelEvent(**values)
        self.db.add(entry)
        await self.db.flush()
        await self.db.refresh(entry)
        log.info("Fuel event %s created for vehicle %s at %s", entry.id, entry.vehicle_id, entry.refuel_at)
        return entry

    async def update_event(self, event_id: int, values: dict[str, Any]) -> FuelEvent:
        entry = await self.get_event(event_id)
        values = self._normalize(dict(values))
        refuel_at = values.get("refuel_at", entry.refuel_at)
        odometer_km = values.get("odometer_km", entry.odometer_km)
        await self._check_odometer(entry.vehicle_id, refuel_at, odometer_km, event_id=entry.id)

        for key, value in values.items():
            setattr(entry, key, value)
        await self.db.flush()
        await self.db.refresh(entry)
        log.info("Fuel event %s updated", entry.id)
        return entry

    async def delete_event(self, event_id: int) -> None:
        entry = await self.get_event(event_id)
        await self.db.delete(entry)
        await self.db.flush()
        log.info("Fuel event %s deleted", event_id)

    async def set_deadlines(self, vehicle_id: int, due_dates: dict[DeadlineType, date | None]) -> None:
        """Upsert par type ; None supprime / Upsert per type; None deletes the row."""
        await self.get_vehicle(vehicle_id)
        result = await self.db.execute(
            select(VehicleDeadline).where(VehicleDeadline.vehicle_id == vehicle_id)
        )
        existing = {d.deadline_type: d for d in result.scalars().all()}

        for deadline_type, due in due_dates.items():
            current = existing.get(deadline_type)
            if due is None:
                if current is not None:
                    await self.db.delete(current)
                continue
            if current is None:
                self.db.add(VehicleDeadline(
                    vehicle_id=vehicle_id,
                    deadline_type=deadline_type,
                    due_date=due.isoformat(),
                ))
            else:
                current.due_date = due.isoformat()
        await self.db.flush()
        log.info("Deadlines updated for vehicle %s: %s", vehicle_id,
                 {t.value: (d.isoformat() if d else None) for t, d in due_dates.items()})
