"""Routes pleins carburant / Refuel ledger routes."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from fleetdesk.api.deps import get_event_store, get_window
from fleetdesk.schemas.fuel import FuelEventCreate, FuelEventRead, FuelEventUpdate, FuelHistoryRow
from fleetdesk.services.consumption import EventMetrics
from fleetdesk.services.event_store import (
    EventNotFoundError,
    EventStore,
    InvalidRefuelTimestampError,
    OdometerSequenceError,
)
from fleetdesk.services.fuel_analytics import FuelAnalyticsService
from fleetdesk.utils.dates import DateWindow, format_refuel_at

router = APIRouter()


def to_history_row(row: EventMetrics, vehicles: dict[int, Any]) -> FuelHistoryRow:
    """Ligne d'historique / History row with computed metrics."""
    vehicle = vehicles.get(row.event.vehicle_id)
    return FuelHistoryRow(
        id=row.event.id,
        vehicle_id=row.event.vehicle_id,
        vehicle_code=getattr(vehicle, "code", None),
        plate=getattr(vehicle, "plate", None),
        refuel_at=format_refuel_at(row.event.refuel_at),
        odometer_km=row.event.odometer_km,
        liters=row.event.liters,
        amount=row.event.amount,
        source_type=row.event.source_type,
        source_identifier=row.event.source_identifier,
        previous_event_id=row.predecessor.id if row.predecessor else None,
        distance_km=row.distance_km,
        km_per_liter=row.km_per_liter,
        liters_per_100km=row.liters_per_100km,
    )


@router.get("/", response_model=list[FuelHistoryRow])
async def list_refuelings(
    vehicle_id: int | None = None,
    window: DateWindow = Depends(get_window),
    store: EventStore = Depends(get_event_store),
):
    """Registre des pleins avec consommation / Refuel ledger with consumption, most recent first.

    Les predecesseurs sont resolus sur tout l'historique, la fenetre ne filtre que les lignes.
    """
    events = await store.list_events(vehicle_id=vehicle_id)
    rows = FuelAnalyticsService.compute_ledger(events, window)
    vehicles = {v.id: v for v in await store.list_vehicles()}
    return [to_history_row(r, vehicles) for r in rows]


@router.post("/", response_model=FuelEventRead, status_code=201)
async def create_refueling(
    data: FuelEventCreate,
    store: EventStore = Depends(get_event_store),
):
    try:
        return await store.create_event(data.model_dump())
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except (InvalidRefuelTimestampError, OdometerSequenceError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.put("/{event_id}", response_model=FuelEventRead)
async def update_refueling(
    event_id: int,
    data: FuelEventUpdate,
    store: EventStore = Depends(get_event_store),
):
    try:
        return await store.update_event(event_id, data.model_dump(exclude_unset=True, exclude_none=True))
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except (InvalidRefuelTimestampError, OdometerSequenceError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/{event_id}", status_code=204)
async def delete_refueling(
    event_id: int,
    store: EventStore = Depends(get_event_store),
):
    try:
        await store.delete_event(event_id)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
