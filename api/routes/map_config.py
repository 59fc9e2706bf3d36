"""
Map credential endpoints.

Pass the map id and public API key from the server environment to the
viewer. ``/api/map-config.js`` is the canonical contract;
``/api/map-credentials.js`` predates it and only carries the map id.
"""

import logging

from fastapi import APIRouter, Depends, Response

from pinmap.config import MapCredentialSettings

logger = logging.getLogger(__name__)
router = APIRouter()


def get_credentials() -> MapCredentialSettings:
    """Read credentials from the environment on every request."""
    return MapCredentialSettings()


def _warn_missing(credentials: MapCredentialSettings, *fields: str) -> None:
    missing = [name for name in fields if not getattr(credentials, name)]
    if missing:
        logger.warning(f"Map credentials not configured: {missing}")


@router.get("/map-config.js")
async def map_config(credentials: MapCredentialSettings = Depends(get_credentials)):
    """Return the map id and API key."""
    _warn_missing(credentials, "map_id", "api_key")
    return {
        "mapId": credentials.map_id,
        "apiKey": credentials.api_key,
    }


@router.get("/map-credentials.js", deprecated=True)
async def map_credentials(
    response: Response,
    credentials: MapCredentialSettings = Depends(get_credentials),
):
    """Return only the map id. Deprecated: use /api/map-config.js."""
    _warn_missing(credentials, "map_id")
    response.headers["Deprecation"] = "true"
    response.headers["Link"] = '</api/map-config.js>; rel="successor-version"'
    return {"mapId": credentials.map_id}
