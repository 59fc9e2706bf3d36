"""
Mapping SDK loader.

Fetches the SDK bootstrap script for an API key and resolves a future with
the loaded library. The loader is an explicit initialization-state object:
the first ``load()`` starts the fetch, later calls get the same future.
"""

import asyncio
from typing import Callable, Optional

import httpx
from loguru import logger

from pinmap.maps.host import MapsLibrary

MAPS_JS_URL = "https://maps.googleapis.com/maps/api/js"


class LibraryLoadError(Exception):
    """The mapping SDK script could not be loaded."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


LibraryFactory = Callable[[str], MapsLibrary]


class MapsLibraryLoader:
    def __init__(
        self,
        library_factory: LibraryFactory,
        http_client: httpx.AsyncClient,
        libraries: str = "places,geocoding",
        version: str = "beta",
        url: str = MAPS_JS_URL,
    ):
        """
        Args:
            library_factory: Builds the library handle once the script loaded
            http_client: Client used to fetch the script
            libraries: Comma separated SDK libraries to request
            version: SDK release channel
            url: Bootstrap script URL
        """
        self.library_factory = library_factory
        self.http_client = http_client
        self.libraries = libraries
        self.version = version
        self.url = url
        self._future: Optional[asyncio.Future] = None
        self._api_key: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def started(self) -> bool:
        return self._future is not None

    def load(self, api_key: str) -> asyncio.Future:
        """Start loading the SDK, or return the load already in flight."""
        if self._future is not None:
            if api_key != self._api_key:
                logger.warning("Mapping library already loading with a different key; reusing it")
            return self._future

        loop = asyncio.get_running_loop()
        self._api_key = api_key
        self._future = loop.create_future()
        self._task = loop.create_task(self._fetch(api_key, self._future))
        return self._future

    async def _fetch(self, api_key: str, future: asyncio.Future) -> None:
        params = {
            "key": api_key,
            "libraries": self.libraries,
            "v": self.version,
        }
        logger.info(f"Loading mapping library ({self.libraries}, v={self.version})")

        try:
            response = await self.http_client.get(self.url, params=params)
            if response.status_code >= 400:
                raise LibraryLoadError(
                    f"Mapping library script returned HTTP {response.status_code}",
                    status_code=response.status_code,
                )
            library = self.library_factory(api_key)
        except httpx.HTTPError as e:
            error = LibraryLoadError(f"Mapping library script failed to load: {e}")
            error.__cause__ = e
            if not future.done():
                future.set_exception(error)
            return
        except Exception as e:
            if not future.done():
                future.set_exception(e)
            return

        if not future.done():
            logger.info("Mapping library loaded")
            future.set_result(library)
