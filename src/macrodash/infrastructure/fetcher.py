"""Fetch-with-timeout utility shared by every external data provider."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from macrodash.domain.exceptions import FetchTimeoutError, TransportFailureError

logger = structlog.get_logger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "macrodash/0.1",
    "Accept": "application/json, text/csv;q=0.9, */*;q=0.8",
}


class HttpFetcher:
    """Issues GET requests with a per-call deadline.

    The deadline covers the whole exchange (connect, headers and body). When it
    elapses the in-flight request is cancelled and ``FetchTimeoutError`` is raised;
    any other failure (status >= 400, connection error, undecodable body) becomes
    ``TransportFailureError``.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._transport = transport
        self._headers = headers or DEFAULT_HEADERS
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                headers=self._headers,
                follow_redirects=True,
                timeout=None,
            )
        return self._client

    async def fetch(
        self,
        url: str,
        timeout_seconds: float,
        *,
        params: dict[str, Any] | None = None,
        as_text: bool = False,
    ) -> Any:
        """Fetch ``url`` and return parsed JSON, or the raw body when ``as_text``.

        Raises:
            FetchTimeoutError: Deadline exceeded before a full response arrived.
            TransportFailureError: Non-success status, network error or bad JSON.
        """
        client = await self._get_client()
        try:
            async with asyncio.timeout(timeout_seconds):
                resp = await client.get(url, params=params)
        except TimeoutError as e:
            logger.debug("Request timed out", url=url, timeout_seconds=timeout_seconds)
            raise FetchTimeoutError(url, timeout_seconds) from e
        except httpx.TimeoutException as e:
            # Raised by transports that enforce their own timeouts; the client sets none.
            raise FetchTimeoutError(url, timeout_seconds) from e
        except httpx.HTTPError as e:
            raise TransportFailureError(f"Request failed: {type(e).__name__}: {e}") from e

        if resp.status_code >= 400:
            raise TransportFailureError(f"Request failed ({resp.status_code})")

        if as_text:
            return resp.text
        try:
            return resp.json()
        except ValueError as e:
            raise TransportFailureError(f"Malformed JSON response from {url}") from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
