"""
FastAPI backend for the pinmap viewer.

Serves the map credentials the client needs at startup and the marker
model assets.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.routes import map_config
from pinmap import __version__
from pinmap.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting pinmap API...")
    credentials = map_config.get_credentials()
    if not credentials.map_id or not credentials.api_key:
        logger.warning("GOOGLE_MAPS_MAP_ID or NEXT_PUBLIC_GOOGLE_MAPS_API_KEY is not set")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="pinmap API",
    description="Map credentials and assets for the 3D marker viewer",
    version=__version__,
    lifespan=lifespan,
)

# CORS - allow the viewer page to connect (configured via API_CORS_ORIGINS env var)
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins_list,
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["Content-Type"],
)

app.include_router(map_config.router, prefix="/api", tags=["config"])

# Serve marker models
_assets_dir = Path(settings.api.assets_dir)
_assets_dir.mkdir(parents=True, exist_ok=True)
app.mount("/assets", StaticFiles(directory=str(_assets_dir)), name="assets")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "version": __version__, "service": "pinmap API"}
