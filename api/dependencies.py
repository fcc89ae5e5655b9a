"""Dependency injection for FastAPI routes."""

from fastapi import Request, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from services.geocoding import GeocodingService
from services.mailer import Mailer
from services.search import AgencySearchEngine


def _from_state(request: Request, name: str):
    """
    Return a collaborator stored on app state by the lifespan.

    Raises:
        HTTPException: If it is not initialized yet.
    """
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(
            status_code=503,
            detail=f"{name} not initialized. Server may be starting up."
        )
    return value


def get_db_dependency(request: Request) -> AsyncIOMotorDatabase:
    return _from_state(request, "db")


def get_geocoder_dependency(request: Request) -> GeocodingService:
    return _from_state(request, "geocoder")


def get_mailer_dependency(request: Request) -> Mailer:
    return _from_state(request, "mailer")


def get_search_engine_dependency(request: Request) -> AgencySearchEngine:
    return _from_state(request, "search_engine")
