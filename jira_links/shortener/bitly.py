"""Bitly v4 shortener client."""

import logging
from typing import Any, Optional

import httpx

from ..errors import ShortenerError
from .config import BitlyConfig

logger = logging.getLogger(__name__)

USER_AGENT = "jira-links/0.1.0"


class BitlyClient:
    """Shortens long URLs through the Bitly v4 API."""

    def __init__(
        self,
        config: Optional[BitlyConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize Bitly client.

        Args:
            config: Bitly configuration, read from the environment when None
            client: HTTP client to use; one is created on first use when None
        """
        self.config = config or BitlyConfig()
        self._client = client
        self._owns_client = client is None

    @property
    def headers(self) -> dict[str, str]:
        self.config.validate()
        return {
            "Authorization": f"Bearer {self.config.token}",
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        }

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def shorten(self, long_url: str) -> str:
        """Shorten a URL.

        Args:
            long_url: URL to shorten

        Returns:
            The short link, e.g. ``https://bit.ly/abc123``

        Raises:
            ShortenerError: If the request fails or the response has no link
        """
        payload: dict[str, Any] = {"long_url": long_url, "domain": self.config.domain}
        if self.config.group_guid:
            payload["group_guid"] = self.config.group_guid
        headers = self.headers

        try:
            response = await self.client.post(
                f"{self.config.api_url}/shorten", json=payload, headers=headers
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Bitly rejected %s: %s %s",
                long_url,
                e.response.status_code,
                e.response.reason_phrase,
            )
            raise ShortenerError(
                f"Bitly returned {e.response.status_code} for {long_url}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error("Error calling Bitly for %s: %s", long_url, e)
            raise ShortenerError(f"Bitly request failed for {long_url}: {e}") from e
        except ValueError as e:
            raise ShortenerError(f"Bitly returned invalid JSON for {long_url}") from e

        link = data.get("link") if isinstance(data, dict) else None
        if not link:
            raise ShortenerError(
                f"Bitly response for {long_url} has no link",
                status_code=response.status_code,
            )
        return str(link)

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BitlyClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
