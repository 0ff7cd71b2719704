"""Routes sources carburant / Fuel source routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.database import get_db
from fleetdesk.models.fuel_source import FuelSource
from fleetdesk.schemas.fuel import FuelSourceCreate, FuelSourceRead, FuelSourceUpdate

router = APIRouter()


@router.get("/", response_model=list[FuelSourceRead])
async def list_fuel_sources(
    active: bool | None = None,
    db: AsyncSession = Depends(get_db),
):
    query = select(FuelSource).order_by(FuelSource.source_type, FuelSource.identifier)
    if active is not None:
        query = query.where(FuelSource.active.is_(active))
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/", response_model=FuelSourceRead, status_code=201)
async def create_fuel_source(
    data: FuelSourceCreate,
    db: AsyncSession = Depends(get_db),
):
    identifier = data.identifier.strip().upper()
    existing = await db.execute(select(FuelSource.id).where(FuelSource.identifier == identifier))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail=f"Fuel source already exists: {identifier}")
    source = FuelSource(
        source_type=data.source_type,
        identifier=identifier,
        active=data.active,
        created_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )
    db.add(source)
    await db.flush()
    await db.refresh(source)
    return source


@router.patch("/{source_id}", response_model=FuelSourceRead)
async def update_fuel_source(
    source_id: int,
    data: FuelSourceUpdate,
    db: AsyncSession = Depends(get_db),
):
    source = await db.get(FuelSource, source_id)
    if not source:
        raise HTTPException(status_code=404, detail="Fuel source not found")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(source, key, value)
    await db.flush()
    await db.refresh(source)
    return source
