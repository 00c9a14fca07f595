"""HTTP fetching for MacEats pages."""

from __future__ import annotations

import logging

import httpx

from .config import DEFAULT_CONNECT_TIMEOUT, DEFAULT_READ_TIMEOUT, DEFAULT_USER_AGENT
from .errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_ACCEPT_HEADER = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
)


class AsyncCrawler:
    """Issues exactly one GET per fetch; errors are never retried."""

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        timeout = httpx.Timeout(
            connect=connect_timeout,
            read=read_timeout,
            write=read_timeout,
            pool=connect_timeout,
        )
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": user_agent,
                "Accept": DEFAULT_ACCEPT_HEADER,
                "Accept-Language": "en-CA,en;q=0.9",
            },
            timeout=timeout,
            http2=True,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "AsyncCrawler":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, url: str) -> str:
        """Return the body of *url*, raising :class:`TransportError` on failure."""

        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as exc:
            logger.debug("Timed out fetching %s: %s", url, exc)
            raise TransportError(url, "request timed out") from exc
        except httpx.RequestError as exc:
            logger.debug("Request error for %s: %s", url, exc)
            raise TransportError(url, f"request failed: {exc}") from exc

        if not response.is_success:
            logger.debug("Unexpected status %s for %s", response.status_code, url)
            raise TransportError(
                url,
                "unexpected response",
                status_code=response.status_code,
            )

        return response.text
