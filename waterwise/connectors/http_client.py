"""WaterWise — Shared JSON API Client.

Handles retry on rate limits, server errors and connection failures. Every
failure that survives the retries is raised as ``NetworkError``.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx

from waterwise.config import settings
from waterwise.core.errors import NetworkError
from waterwise.core.logging import get_logger

logger = get_logger("connectors.http")


class JSONAPIClient:
    """Async HTTP client for read-only public JSON APIs."""

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_base_delay: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = (
            max_retries if max_retries is not None else settings.http_max_retries
        )
        self.retry_base_delay = (
            retry_base_delay
            if retry_base_delay is not None
            else settings.http_retry_base_delay
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _error_reason(self, response: httpx.Response) -> str:
        """Pull a human readable reason out of an error body."""
        return ""

    async def _get_json(
        self,
        path: str,
        params: Dict[str, Any] | None = None,
    ) -> Any:
        """GET ``base_url + path`` with retry + rate-limit handling."""
        url = f"{self.base_url}{path}"
        client = await self._get_client()

        for attempt in range(1, self.max_retries + 1):
            wait = self.retry_base_delay * (2 ** (attempt - 1))
            try:
                resp = await client.get(url, params=params)

                # Rate limited
                if resp.status_code == 429 and attempt < self.max_retries:
                    logger.warning(
                        f"Rate limited (429). Retrying in {wait}s (attempt {attempt}/{self.max_retries})"
                    )
                    await asyncio.sleep(wait)
                    continue

                resp.raise_for_status()
                return resp.json()

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if attempt < self.max_retries and status >= 500:
                    logger.warning(f"Server error {status}. Retrying in {wait}s")
                    await asyncio.sleep(wait)
                    continue
                reason = self._error_reason(e.response) or f"Request failed: {status}"
                raise NetworkError(reason, status) from e

            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    logger.warning(f"Request error: {e}. Retrying in {wait}s")
                    await asyncio.sleep(wait)
                    continue
                raise NetworkError(
                    "No internet connection. Please check your network."
                ) from e

            except ValueError as e:
                raise NetworkError(f"Malformed response from {url}") from e

        raise NetworkError("Max retries exhausted")
