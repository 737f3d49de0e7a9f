"""HTTP image connector backed by httpx."""

from typing import Any

import httpx

from cookbookconverter.config import get_settings
from cookbookconverter.ingest.connectors.base import (
    ConnectorResponse,
    ImageFetcher,
    ImageFetchError,
)
from cookbookconverter.logging_config import get_logger

logger = get_logger(__name__)


class HttpImageConnector(ImageFetcher):
    """Downloads images over HTTP(S)."""

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.timeout = timeout or settings.image_timeout or self.DEFAULT_TIMEOUT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        """Return connector name."""
        return "http"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers={"User-Agent": "cookbookconverter/0.1"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> ConnectorResponse:
        """Download a single image; non-2xx statuses are returned, not raised."""
        client = await self._get_client()

        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise ImageFetchError(f"Request failed: {e}", url=url) from e

        logger.debug(f"GET {url} -> {response.status_code}")
        return ConnectorResponse(
            content=response.content,
            status_code=response.status_code,
            url=str(response.url),
            headers=dict(response.headers),
        )

    async def __aenter__(self) -> "HttpImageConnector":
        """Async context manager entry."""
        await self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()
