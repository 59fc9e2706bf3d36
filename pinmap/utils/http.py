"""
HTTP utilities for downloading viewer assets.

Downloads are streamed so callers can follow progress, and retried on
transient transport failures. Error statuses are raised as ``HTTPError``.
"""

from typing import Callable, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
from loguru import logger

from pinmap.config import settings


DEFAULT_HEADERS = {
    "User-Agent": "pinmap/1.0 (3D marker viewer)",
    "Accept": "model/gltf-binary, application/octet-stream, */*",
}

DEFAULT_CHUNK_SIZE = 64 * 1024

# Called with (bytes received so far, expected total or 0 when unknown)
ProgressCallback = Callable[[int, int], None]


class HTTPError(Exception):
    """HTTP error with status code."""

    def __init__(self, message: str, status_code: int = None, response: httpx.Response = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class RateLimitError(HTTPError):
    """Raised when the asset host answers 429."""

    def __init__(self, message: str, retry_after: int = 60, response: httpx.Response = None):
        super().__init__(message, status_code=429, response=response)
        self.retry_after = retry_after


def _retry_after(response: httpx.Response) -> int:
    try:
        return int(response.headers.get("Retry-After", "60"))
    except ValueError:
        # HTTP-date form; treat as the default wait
        return 60


def _check_status(response: httpx.Response, url: str) -> None:
    if response.status_code == 429:
        retry_after = _retry_after(response)
        raise RateLimitError(
            f"Rate limited by {url}. Retry after {retry_after}s",
            retry_after=retry_after,
            response=response,
        )

    if response.status_code >= 400:
        response.read()
        raise HTTPError(
            f"HTTP {response.status_code} for {url}: {response.text[:200]}",
            status_code=response.status_code,
            response=response,
        )


@retry(
    stop=stop_after_attempt(settings.marker.http_max_retries),
    wait=wait_exponential(multiplier=settings.marker.http_retry_delay, min=1, max=30),
    retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
    reraise=True,
)
def download_with_retry(
    url: str,
    on_progress: Optional[ProgressCallback] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    headers: Optional[dict] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> bytes:
    """
    Stream a URL into memory with automatic retry on transient failures.

    Args:
        url: URL to fetch
        on_progress: Called after every chunk with (loaded, total)
        chunk_size: Bytes per streamed chunk
        headers: Additional headers to include
        timeout: Request timeout in seconds
        transport: Optional transport override (used by tests)

    Returns:
        The response body

    Raises:
        HTTPError: For HTTP errors (4xx, 5xx)
        RateLimitError: When rate limited (429)
        httpx.TimeoutException: On timeout after retries
    """
    request_headers = {**DEFAULT_HEADERS, **(headers or {})}
    timeout = timeout or settings.viewer.http_timeout

    logger.debug(f"Downloading {url}")

    with httpx.Client(timeout=timeout, follow_redirects=True, transport=transport) as client:
        with client.stream("GET", url, headers=request_headers) as response:
            _check_status(response, url)

            try:
                total = int(response.headers.get("Content-Length", 0))
            except ValueError:
                total = 0

            buffer = bytearray()
            for chunk in response.iter_bytes(chunk_size=chunk_size):
                buffer.extend(chunk)
                if on_progress:
                    on_progress(len(buffer), total)

    logger.debug(f"Downloaded {url} ({len(buffer)} bytes)")
    return bytes(buffer)
