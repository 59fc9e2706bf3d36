"""
Address geocoding.

Uses Google's Geocoding web service. Like the SDK geocoder, failures are
reported through the response status rather than raised.
"""

from dataclasses import dataclass, field
from typing import Optional

import httpx
from loguru import logger

from pinmap.types import LatLng
from pinmap.utils.geo import is_valid_coordinates

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

# Statuses documented by the Geocoding API
STATUS_OK = "OK"
STATUS_ZERO_RESULTS = "ZERO_RESULTS"
STATUS_UNKNOWN_ERROR = "UNKNOWN_ERROR"
STATUS_ERROR = "ERROR"  # the service could not be reached


@dataclass(frozen=True)
class GeocodeResult:
    location: LatLng
    formatted_address: str = ""
    place_id: Optional[str] = None


@dataclass
class GeocodeResponse:
    status: str
    results: list[GeocodeResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK and len(self.results) > 0


def parse_geocode_body(data) -> GeocodeResponse:
    """Parse a Geocoding API JSON body. Bodies of the wrong shape map to UNKNOWN_ERROR."""
    if not isinstance(data, dict):
        logger.warning(f"Unexpected geocode body: {data!r:.200}")
        return GeocodeResponse(status=STATUS_UNKNOWN_ERROR)

    raw_results = data.get("results") or []
    if not isinstance(raw_results, list):
        logger.warning(f"Unexpected geocode results: {raw_results!r:.200}")
        return GeocodeResponse(status=STATUS_UNKNOWN_ERROR)

    status = str(data.get("status", STATUS_UNKNOWN_ERROR))
    results = []
    for item in raw_results:
        try:
            loc = item["geometry"]["location"]
            location = LatLng(latitude=float(loc["lat"]), longitude=float(loc["lng"]))
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping malformed geocode result: {item!r:.200}")
            continue
        if not is_valid_coordinates(location.latitude, location.longitude):
            logger.warning(f"Skipping out-of-range geocode result: {location}")
            continue
        results.append(GeocodeResult(
            location=location,
            formatted_address=item.get("formatted_address", ""),
            place_id=item.get("place_id"),
        ))
    return GeocodeResponse(status=status, results=results)


class GoogleGeocoder:
    """Geocoder backed by the Geocoding web service."""

    def __init__(self, api_key: str, http_client: httpx.AsyncClient, url: str = GEOCODE_URL):
        self.api_key = api_key
        self.http_client = http_client
        self.url = url

    async def geocode(self, address: str) -> GeocodeResponse:
        try:
            response = await self.http_client.get(
                self.url,
                params={"address": address, "key": self.api_key},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Geocoding request failed: {e}")
            return GeocodeResponse(status=STATUS_ERROR)

        if response.status_code != 200:
            logger.warning(f"Geocoding API error: {response.status_code}")
            return GeocodeResponse(status=STATUS_UNKNOWN_ERROR)

        try:
            data = response.json()
        except ValueError:
            logger.warning("Geocoding API returned a non-JSON body")
            return GeocodeResponse(status=STATUS_UNKNOWN_ERROR)

        return parse_geocode_body(data)
