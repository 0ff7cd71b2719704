"""Routes Vehicules / Vehicle API routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.database import get_db
from fleetdesk.models.deadline import VehicleDeadline
from fleetdesk.models.fuel_event import FuelEvent
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.schemas.fuel import FuelHistoryRow
from fleetdesk.schemas.vehicle import VehicleCreate, VehicleRead, VehicleStatusUpdate, VehicleUpdate
from fleetdesk.api.deps import get_event_store
from fleetdesk.api.refuelings import to_history_row
from fleetdesk.services.event_store import EventStore
from fleetdesk.services.fuel_analytics import FuelAnalyticsService

router = APIRouter()


async def _ensure_unique_code(db: AsyncSession, code: str, exclude_id: int | None = None) -> None:
    query = select(Vehicle.id).where(Vehicle.code == code)
    if exclude_id is not None:
        query = query.where(Vehicle.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail=f"Vehicle code already exists: {code}")


@router.get("/", response_model=list[VehicleRead])
async def list_vehicles(
    active: bool | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Lister les vehicules / List vehicles."""
    query = select(Vehicle).order_by(Vehicle.code)
    if active is not None:
        query = query.where(Vehicle.active.is_(active))
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{vehicle_id}", response_model=VehicleRead)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
):
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return vehicle


@router.post("/", response_model=VehicleRead, status_code=201)
async def create_vehicle(
    data: VehicleCreate,
    db: AsyncSession = Depends(get_db),
):
    """Creer un vehicule / Create a vehicle."""
    await _ensure_unique_code(db, data.code)
    dump = data.model_dump()
    dump["created_at"] = datetime.now(timezone.utc).isoformat(timespec="seconds")
    vehicle = Vehicle(**dump)
    db.add(vehicle)
    await db.flush()
    await db.refresh(vehicle)
    return vehicle


@router.put("/{vehicle_id}", response_model=VehicleRead)
async def update_vehicle(
    vehicle_id: int,
    data: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
):
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    values = data.model_dump(exclude_unset=True)
    if values.get("code"):
        await _ensure_unique_code(db, values["code"], exclude_id=vehicle_id)
    for key, value in values.items():
        setattr(vehicle, key, value)
    await db.flush()
    await db.refresh(vehicle)
    return vehicle


@router.patch("/{vehicle_id}/status", response_model=VehicleRead)
async def update_vehicle_status(
    vehicle_id: int,
    data: VehicleStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Activer/desactiver un vehicule / Toggle the active flag."""
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    vehicle.active = data.active
    await db.flush()
    await db.refresh(vehicle)
    return vehicle


@router.delete("/{vehicle_id}", status_code=204)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
):
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    # Pleins et echeances du vehicule / The vehicle's events and deadlines
    await db.execute(delete(FuelEvent).where(FuelEvent.vehicle_id == vehicle_id))
    await db.execute(delete(VehicleDeadline).where(VehicleDeadline.vehicle_id == vehicle_id))
    await db.delete(vehicle)


@router.get("/{vehicle_id}/history", response_model=list[FuelHistoryRow])
async def vehicle_history(
    vehicle_id: int,
    store: EventStore = Depends(get_event_store),
):
    """Historique des pleins avec consommation / Refuel history with consumption, most recent first."""
    vehicle = await store.db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    events = await store.list_events(vehicle_id=vehicle_id)
    rows = FuelAnalyticsService.compute_history(events, vehicle_id=vehicle_id)
    return [to_history_row(r, {vehicle.id: vehicle}) for r in rows]
