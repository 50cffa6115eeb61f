"""RANKLENS — Shared Provider HTTP Client.

Handles retry logic, rate limiting, and error classification for every
search provider connector.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx

from app.config import settings
from app.core.logging import get_logger

logger = get_logger("connectors.http")

MAX_RETRIES = 3
RETRY_BASE_DELAY = 2  # seconds


class ProviderAPIError(Exception):
    """Raised when a provider call fails.

    unreachable=True: network failure, timeout or retries exhausted.
    unreachable=False: the provider answered and rejected the request.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int = 0,
        unreachable: bool = False,
    ):
        self.provider = provider
        self.status_code = status_code
        self.unreachable = unreachable
        super().__init__(message)


class ProviderClient:
    """Async HTTP client base with retry + rate-limit handling."""

    provider = "provider"

    def __init__(
        self,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_base_delay: float = RETRY_BASE_DELAY,
    ):
        self.timeout = timeout or settings.provider_timeout_seconds
        self.retry_base_delay = retry_base_delay
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

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _error_message(self, response: httpx.Response) -> str:
        """Extract a provider error message from a failed response."""
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or response.reason_phrase
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                return str(error.get("message", error))
            if error:
                return str(error)
            if body.get("Message"):
                return str(body["Message"])
        return response.reason_phrase

    async def _request(
        self,
        method: str,
        url: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
        headers: Dict[str, str] | None = None,
    ) -> Any:
        """Make a request with retry + rate-limit handling."""
        client = await self._get_client()

        for attempt in range(1, MAX_RETRIES + 1):
            try:
                resp = await client.request(
                    method, url, params=params, json=json, headers=headers
                )

                # Rate limited
                if resp.status_code == 429:
                    if attempt == MAX_RETRIES:
                        break
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(
                        f"Rate limited (429) by {self.provider}. Retrying in {wait}s (attempt {attempt}/{MAX_RETRIES})",
                        extra={"provider": self.provider, "attempt": attempt},
                    )
                    await asyncio.sleep(wait)
                    continue

                resp.raise_for_status()
                return resp.json()

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if attempt < MAX_RETRIES and status >= 500:
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(
                        f"{self.provider} server error {status}. Retrying in {wait}s",
                        extra={"provider": self.provider, "status_code": status},
                    )
                    await asyncio.sleep(wait)
                    continue

                raise ProviderAPIError(
                    self._error_message(e.response),
                    self.provider,
                    status,
                    unreachable=status >= 500,
                ) from e

            except httpx.TimeoutException as e:
                # The timeout is the whole budget for the call; no retry
                raise ProviderAPIError(
                    f"{self.provider} timed out after {self.timeout}s: {e!r}",
                    self.provider,
                    unreachable=True,
                ) from e

            except httpx.RequestError as e:
                if attempt < MAX_RETRIES:
                    wait = self.retry_base_delay * (2 ** (attempt - 1))
                    logger.warning(
                        f"{self.provider} request error: {e!r}. Retrying in {wait}s",
                        extra={"provider": self.provider, "attempt": attempt},
                    )
                    await asyncio.sleep(wait)
                    continue
                raise ProviderAPIError(
                    f"Connection failed after {MAX_RETRIES} retries: {e!r}",
                    self.provider,
                    unreachable=True,
                ) from e

            except ValueError as e:
                raise ProviderAPIError(
                    f"Invalid JSON from {self.provider}: {e}", self.provider
                ) from e

        raise ProviderAPIError(
            "Max retries exhausted", self.provider, 429, unreachable=True
        )
