"""
Dépendances communes des routes / Shared route dependencies.
Injectées dans les routes via Depends().
"""

from datetime import datetime

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.database import get_db
from fleetdesk.services.event_store import EventStore
from fleetdesk.utils.dates import DateWindow


async def get_event_store(db: AsyncSession = Depends(get_db)) -> EventStore:
    return EventStore(db)


def get_now() -> datetime:
    """Instant de reference capture une fois par requete / Reference instant, captured once per request."""
    return datetime.now()


def get_window(
    date_from: str | None = Query(None, description="YYYY-MM-DD ou YYYY-MM-DDTHH:MM"),
    date_to: str | None = Query(None, description="YYYY-MM-DD ou YYYY-MM-DDTHH:MM (inclus)"),
) -> DateWindow:
    """Fenetre de dates depuis la query string / Date window from the query string."""
    try:
        return DateWindow.from_bounds(date_from, date_to)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
