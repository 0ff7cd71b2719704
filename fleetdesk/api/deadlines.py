"""Routes échéances véhicules / Vehicle deadline routes."""

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query

from fleetdesk.api.deps import get_event_store, get_now
from fleetdesk.config import settings
from fleetdesk.models.deadline import DeadlineType
from fleetdesk.schemas.deadline import (
    DeadlineAlertsRead,
    DeadlineStatusRead,
    DeadlineSummaryRead,
    DeadlineUpsert,
)
from fleetdesk.services.deadline_classifier import DeadlineClassifier
from fleetdesk.services.event_store import EventNotFoundError, EventStore

router = APIRouter()


@router.get("/vehicles/{vehicle_id}/deadlines", response_model=list[DeadlineStatusRead])
async def get_vehicle_deadlines(
    vehicle_id: int,
    store: EventStore = Depends(get_event_store),
    now: datetime = Depends(get_now),
):
    """Toutes les echeances d'un vehicule, y compris non renseignees / All deadline types, Unset included."""
    try:
        vehicle = await store.get_vehicle(vehicle_id)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    due_by_type = {d.deadline_type: d.due_date for d in await store.list_deadlines(vehicle_id=vehicle_id)}

    items = []
    for deadline_type in DeadlineType:
        due = due_by_type.get(deadline_type)
        classification = DeadlineClassifier.classify(due, now)
        items.append(DeadlineStatusRead(
            vehicle_id=vehicle.id,
            vehicle_code=vehicle.code,
            plate=vehicle.plate,
            deadline_type=deadline_type,
            due_date=due,
            state=classification.state,
            days_left=classification.days_left,
        ))
    return items


@router.put("/vehicles/{vehicle_id}/deadlines", response_model=list[DeadlineStatusRead])
async def set_vehicle_deadlines(
    vehicle_id: int,
    data: DeadlineUpsert,
    store: EventStore = Depends(get_event_store),
    now: datetime = Depends(get_now),
):
    """Remplacer les echeances ; un type vide est supprime / Replace deadlines; an empty type is cleared."""
    due_dates = {t: getattr(data, t.value) for t in DeadlineType}
    try:
        await store.set_deadlines(vehicle_id, due_dates)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return await get_vehicle_deadlines(vehicle_id, store, now)


@router.get("/deadlines/summary", response_model=DeadlineSummaryRead)
async def deadlines_summary(
    store: EventStore = Depends(get_event_store),
    now: datetime = Depends(get_now),
):
    """Comptage par etat, vehicules actifs / Counts per state over active vehicles.

    Chaque couple (vehicule, type) compte une fois ; sans date il est Unset.
    Each (vehicle, type) pair counts once; a pair without a due date is Unset.
    """
    vehicles = await store.list_vehicles(active_only=True)
    due_by_pair = {
        (r.vehicle_id, r.deadline_type): r.due_date
        for r in await store.list_deadlines(active_only=True)
    }
    due_dates = [
        due_by_pair.get((vehicle.id, deadline_type))
        for vehicle in vehicles
        for deadline_type in DeadlineType
    ]
    summary = DeadlineClassifier.summarize(due_dates, now)
    return DeadlineSummaryRead(
        valid=summary.valid,
        warning=summary.warning,
        expired=summary.expired,
        unset=summary.unset,
        total=summary.total,
        generated_at=now.isoformat(timespec="seconds"),
    )


@router.get("/deadlines/alerts", response_model=DeadlineAlertsRead)
async def deadline_alerts(
    days: int = Query(settings.DEADLINE_ALERT_WINDOW_DAYS, ge=1, le=365),
    store: EventStore = Depends(get_event_store),
    now: datetime = Depends(get_now),
):
    """Echeances depassees ou dans `days` jours / Deadlines expired or due within `days` days."""
    horizon = (now + timedelta(days=days)).date()
    items = []
    for record in await store.list_deadlines(active_only=True):
        if record.due_date > horizon:
            continue
        classification = DeadlineClassifier.classify(record.due_date, now)
        items.append(DeadlineStatusRead(
            vehicle_id=record.vehicle_id,
            vehicle_code=record.vehicle_code,
            plate=record.plate,
            deadline_type=record.deadline_type,
            due_date=record.due_date,
            state=classification.state,
            days_left=classification.days_left,
        ))
    items.sort(key=lambda i: (i.due_date, i.vehicle_code or ""))
    return DeadlineAlertsRead(
        window_days=days,
        count=len(items),
        generated_at=now.isoformat(timespec="seconds"),
        data=items,
    )
