"""
Base HTTP client shared by the geocoding, station and weather clients.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import httpx

from .config import ClientConfig
from .exceptions import ConditionsError, UpstreamError, UpstreamTimeout

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class BaseClient:
    """
    Async client for one upstream provider.

    Transport and HTTP failures are translated into the pescador error
    taxonomy. Timeouts and 429/5xx responses are retried up to
    ``config.max_retries`` times with exponential backoff; other 4xx
    responses fail immediately.
    """

    service_name = "upstream"

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self.timeout = self.config.timeout
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "BaseClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _error_for_status(self, status_code: int, error: Exception) -> ConditionsError:
        """Map a final HTTP error status to an exception."""
        if status_code == 404:
            return UpstreamError(f"{self.service_name}: resource not found")
        if status_code == 429:
            return UpstreamError(f"{self.service_name}: rate limit exceeded")
        if status_code >= 500:
            return UpstreamError(f"{self.service_name} service temporarily unavailable")
        return UpstreamError(f"{self.service_name}: HTTP error {status_code}")

    async def _make_request(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a JSON document with retry and error handling."""
        attempts = self.config.max_retries + 1

        for attempt in range(attempts):
            last = attempt == attempts - 1
            try:
                response = await self._client.get(url, params=params)
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                if not last:
                    await self._backoff(attempt, "timeout")
                    continue
                raise UpstreamTimeout(
                    f"{self.service_name}: request timeout after {self.timeout}s"
                ) from e
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status in RETRYABLE_STATUS and not last:
                    await self._backoff(attempt, f"HTTP {status}")
                    continue
                raise self._error_for_status(status, e) from e
            except httpx.RequestError as e:
                raise UpstreamError(f"{self.service_name}: network error: {e}") from e
            except json.JSONDecodeError as e:
                raise UpstreamError(f"{self.service_name}: invalid JSON response: {e}") from e

        # range(attempts) always returns or raises
        raise UpstreamError(f"{self.service_name}: request failed")

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = self.config.retry_backoff * (2**attempt)
        logger.warning(
            f"{self.service_name} request failed ({reason}); "
            f"retrying in {delay:.2f}s (attempt {attempt + 2}/{self.config.max_retries + 1})"
        )
        await asyncio.sleep(delay)
