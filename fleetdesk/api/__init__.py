"""Routes API / API routes."""

from fastapi import APIRouter

from fleetdesk.api import (
    vehicles,
    refuelings,
    fuel_sources,
    deadlines,
    dashboard,
    exports,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(refuelings.router, prefix="/refuelings", tags=["refuelings"])
api_router.include_router(fuel_sources.router, prefix="/fuel-sources", tags=["fuel-sources"])
api_router.include_router(deadlines.router, tags=["deadlines"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(exports.router, prefix="/exports", tags=["exports"])
