"""Routes Export CSV/Excel/PDF / Export API routes."""

import io

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from fleetdesk.api.dashboard import build_dashboard
from fleetdesk.api.deps import get_event_store, get_window
from fleetdesk.config import settings
from fleetdesk.rate_limit import limiter
from fleetdesk.services.event_store import EventStore
from fleetdesk.services.export_service import LEDGER_FIELDS, ExportService
from fleetdesk.services.fuel_analytics import FuelAnalyticsService
from fleetdesk.utils.dates import DateWindow, format_refuel_at

router = APIRouter()

MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pdf": "application/pdf",
}


def _period_label(window: DateWindow) -> str:
    start = format_refuel_at(window.date_from) if window.date_from else "-"
    end = format_refuel_at(window.date_to) if window.date_to else "-"
    return f"Period: {start} to {end}"


def _attachment(content: bytes, fmt: str, basename: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(content),
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{basename}.{fmt}"'},
    )


@router.get("/refuelings")
@limiter.limit(settings.RATE_LIMIT_EXPORT)
async def export_refuelings(
    request: Request,
    format: str = Query("csv", pattern="^(csv|xlsx|pdf)$"),
    vehicle_id: int | None = None,
    window: DateWindow = Depends(get_window),
    store: EventStore = Depends(get_event_store),
):
    """Exporter le registre des pleins / Export the refuel ledger."""
    events = await store.list_events(vehicle_id=vehicle_id)
    rows = FuelAnalyticsService.compute_ledger(events, window)
    vehicles = {v.id: v for v in await store.list_vehicles()}
    data = ExportService.ledger_rows(rows, vehicles)

    if format == "csv":
        content = ExportService.to_csv(data, LEDGER_FIELDS)
    elif format == "xlsx":
        content = ExportService.to_xlsx([("Refuelings", data, LEDGER_FIELDS)])
    else:
        content = ExportService.to_pdf("Refuel ledger", _period_label(window), [("Refuelings", data, LEDGER_FIELDS)])
    return _attachment(content, format, "refuelings")


@router.get("/dashboard")
@limiter.limit(settings.RATE_LIMIT_EXPORT)
async def export_dashboard(
    request: Request,
    format: str = Query("pdf", pattern="^(xlsx|pdf)$"),
    window: DateWindow = Depends(get_window),
    store: EventStore = Depends(get_event_store),
):
    """Exporter le tableau de bord / Export the fuel dashboard."""
    aggregate, vehicles = await build_dashboard(store, window)
    sheets = ExportService.dashboard_sheets(aggregate, vehicles)

    if format == "xlsx":
        content = ExportService.to_xlsx(sheets)
    else:
        content = ExportService.to_pdf("Fuel dashboard", _period_label(window), sheets)
    return _attachment(content, format, "fuel-dashboard")
