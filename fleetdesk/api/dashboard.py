"""Routes tableau de bord carburant / Fuel dashboard routes."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from fleetdesk.api.deps import get_event_store, get_window
from fleetdesk.config import settings
from fleetdesk.schemas.dashboard import FuelDashboardResponse, MonthlyBucketItem, VehicleConsumptionItem
from fleetdesk.services.aggregator import DashboardAggregate, VehicleConsumption
from fleetdesk.services.event_store import EventStore
from fleetdesk.services.fuel_analytics import FuelAnalyticsService
from fleetdesk.utils.dates import DateWindow, format_refuel_at

router = APIRouter()


def _consumption_item(item: VehicleConsumption, vehicles: dict[int, Any]) -> VehicleConsumptionItem:
    vehicle = vehicles.get(item.vehicle_id)
    return VehicleConsumptionItem(
        vehicle_id=item.vehicle_id,
        vehicle_code=getattr(vehicle, "code", None),
        plate=getattr(vehicle, "plate", None),
        model=getattr(vehicle, "model", None),
        avg_km_per_liter=round(item.avg_km_per_liter, 2),
        avg_liters_per_100km=round(item.avg_liters_per_100km, 2),
        samples=item.samples,
        total_liters=round(item.total_liters, 2),
        total_distance_km=round(item.total_distance_km, 2),
    )


def to_dashboard_response(aggregate: DashboardAggregate, window: DateWindow,
                          vehicles: dict[int, Any]) -> FuelDashboardResponse:
    avg = aggregate.avg_consumption_km_l
    return FuelDashboardResponse(
        date_from=format_refuel_at(window.date_from) if window.date_from else None,
        date_to=format_refuel_at(window.date_to) if window.date_to else None,
        total_liters=round(aggregate.total_liters, 2),
        total_amount=round(aggregate.total_amount, 2),
        total_distance_km=round(aggregate.total_distance_km, 2),
        avg_consumption_km_l=round(avg, 2) if avg is not None else None,
        event_count=aggregate.event_count,
        top_consumers=[_consumption_item(i, vehicles) for i in aggregate.top_consumers],
        monthly_series=[
            MonthlyBucketItem(
                month=b.month,
                liters=round(b.liters, 2),
                amount=round(b.amount, 2),
                distance_km=round(b.distance_km, 2),
            )
            for b in aggregate.monthly_series
        ],
        vehicle_comparison=[_consumption_item(i, vehicles) for i in aggregate.vehicle_comparison],
    )


async def build_dashboard(store: EventStore, window: DateWindow, top: int | None = None) -> tuple[DashboardAggregate, dict[int, Any]]:
    """Charger tout l'historique puis agreger / Load full history, then aggregate over the window."""
    events = await store.list_events()
    aggregate = FuelAnalyticsService.compute_dashboard(
        events,
        window,
        top_n=top or settings.TOP_CONSUMERS_LIMIT,
        carry_baseline=settings.CARRY_ODOMETER_BASELINE,
    )
    vehicles = {v.id: v for v in await store.list_vehicles()}
    return aggregate, vehicles


@router.get("", response_model=FuelDashboardResponse)
async def fuel_dashboard(
    top: int | None = Query(None, ge=1, le=50, description="Nombre de vehicules en tete de classement"),
    window: DateWindow = Depends(get_window),
    store: EventStore = Depends(get_event_store),
):
    """Totaux, classement et serie mensuelle / Totals, ranking and monthly series."""
    aggregate, vehicles = await build_dashboard(store, window, top)
    return to_dashboard_response(aggregate, window, vehicles)
