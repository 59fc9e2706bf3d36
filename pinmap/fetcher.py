"""
Configuration fetcher.

Retrieves the map id and API key from the backend once at startup.
"""

from typing import Optional

import httpx
from loguru import logger

from pinmap.types import MapConfig


async def fetch_map_config(client: httpx.AsyncClient, url: str) -> Optional[MapConfig]:
    """
    Fetch and parse the map configuration.

    Any failure (network, status, body) is logged and reported as ``None``;
    there is no retry.
    """
    try:
        response = await client.get(url)
        response.raise_for_status()
        config = MapConfig.from_dict(response.json())
    except Exception as e:
        logger.error(f"Failed to fetch map configuration: {e}")
        return None

    logger.debug(f"Map configuration fetched (mapId={config.map_id})")
    return config
