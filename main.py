"""Main application entry point for the Foster Toys API."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from modules.config import ConfigEnv

# Import routers and db
from routers.agencies import router as agencies_router
from routers.volunteers import router as volunteers_router
from routers.admin import router as admin_router
from routers.auth import router as auth_router
from db.connection import get_db, close_client, ping
from db.indexes import create_indexes
from db.admin_seed import seed_admins
from services.geocoding import GeocodingService
from services.mailer import Mailer, SmtpSettings
from services.search import AgencySearchEngine, MongoAgencyStore

# Configure logging
logging.basicConfig(
    level=ConfigEnv.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI app.
    Builds the collaborators routes depend on and stores them on app.state.
    """
    logger.info("Starting up Foster Toys API...")
    ConfigEnv.validate()

    if ConfigEnv.GEOCODER_PROVIDER == "google" and not ConfigEnv.GOOGLE_MAPS_API_KEY:
        logger.warning("GEOCODER_PROVIDER=google but GOOGLE_MAPS_API_KEY not set - geocoding will fail")

    db = get_db()
    try:
        await ping(db)
    except PyMongoError as e:
        logger.error(f"MongoDB connection error: {e}")
        raise
    logger.info("✓ MongoDB connected")
    app.state.db = db
    try:
        await create_indexes(db)
    except PyMongoError as e:
        # Search still works without the 2dsphere index (postal matching only)
        logger.warning(f"Could not ensure indexes: {e}")
    seeded = await seed_admins(db, ConfigEnv.get_admin_seed_accounts())
    if seeded:
        logger.info(f"Seeded {seeded} admin account(s)")

    geocoder = GeocodingService()
    app.state.geocoder = geocoder
    app.state.mailer = Mailer(SmtpSettings.from_env())
    app.state.search_engine = AgencySearchEngine(MongoAgencyStore(db.agencies), geocoder)

    logger.info("✓ Startup complete")

    yield  # Application runs here

    logger.info("Shutting down Foster Toys API...")
    close_client()
    logger.info("✓ Shutdown complete")


# Initialize FastAPI app with lifespan
app = FastAPI(
    title="Foster Toys API",
    description="Agency onboarding, volunteer registration and nearby agency search",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ConfigEnv.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Authorization"],
)

# Include routers
app.include_router(agencies_router)
app.include_router(volunteers_router)
app.include_router(admin_router)
app.include_router(auth_router)


@app.get("/")
async def root():
    """Root endpoint for API health check."""
    return {
        "name": "Foster Toys API",
        "status": "running",
        "version": "1.0.0",
        "endpoints": {
            "agencies_nearby": "GET /api/agencies/nearby",
            "agency_invite": "POST /api/agencies/invite-agency",
            "volunteer_register": "POST /api/volunteer/register",
            "admin_login": "POST /api/admin/login",
            "forgot_password": "POST /api/auth/forgot-password",
            "docs": "/docs"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="localhost", port=8000)
