"""FastAPI application for the club logo service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import models  # noqa: F401  (registers tables on SQLModel.metadata)
from app.clubs.resolver import get_club_resolver
from app.clubs.routes import router as clubs_router
from app.config import get_settings
from app.database import close_db, init_db
from app.errors import LogoServiceError, logo_service_error_handler
from app.logos.routes import router as logos_router
from app.logos.storage import get_logo_storage

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting club logo service...")
    storage = get_logo_storage()
    storage.ensure_dirs()
    logger.info(f"Logos directory: {storage.root}")
    await init_db()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await get_club_resolver().aclose()
    await close_db()


app = FastAPI(
    title="Club Logos",
    description="Czech club identity lookup and logo storage",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(",") if o.strip()],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.add_exception_handler(LogoServiceError, logo_service_error_handler)

# Include routers
app.include_router(clubs_router)
app.include_router(logos_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
