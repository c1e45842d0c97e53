"""Fetches remote resources into in-memory documents."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

from .documents import SourceDocument
from .errors import ResourceFetchError
from .settings import settings

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"


def filename_from_url(url: str, title: str = "") -> str:
    """Name a fetched resource: the title if given, else the last URL path segment."""
    if title:
        return title
    path = urlparse(url).path
    segment = unquote(path.rstrip("/").rsplit("/", 1)[-1]) if path else ""
    return segment or "resource"


class ResourceFetcher:
    """Downloads a URL into a :class:`SourceDocument`."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds (defaults to FETCH_TIMEOUT_SECONDS)
            transport: Optional httpx transport, used by tests
        """
        self.timeout = timeout if timeout is not None else settings.fetch_timeout_seconds
        self._transport = transport

    async def fetch(self, url: str, title: str = "") -> SourceDocument:
        """Fetch ``url`` and wrap the body as a document.

        Raises:
            ResourceFetchError: If the request fails or returns a non-2xx status
        """
        filename = filename_from_url(url, title)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Fetching %s failed: %s", url, e)
            raise ResourceFetchError(f"Failed to fetch resource content: {e}") from e

        if not response.is_success:
            logger.error("Fetching %s returned %s", url, response.status_code)
            raise ResourceFetchError(
                f"Failed to fetch resource content ({response.status_code})",
                status=response.status_code,
            )

        media_type = response.headers.get("content-type") or DEFAULT_MEDIA_TYPE
        return SourceDocument(data=response.content, filename=filename, media_type=media_type)
