"""
Pooled async HTTP transport for registry requests.

:class:`HTTPClient` wraps one ``httpx.AsyncClient`` (HTTP/2 enabled) that
every registry endpoint shares. It retries transient failures and reports
everything else as :class:`~nuscout.exceptions.NetworkError`; deciding
whether a failure disqualifies a registry is left to
:mod:`nuscout.core.protocol`.

Retry policy:

- timeouts, transport errors and 5xx responses are retried with
  exponential backoff and jitter;
- 429 and 503 responses wait for ``Retry-After`` when the server sends it;
- any other 4xx response fails immediately.
"""

from __future__ import annotations

import httpx
import random
import asyncio
from typing import Any, Dict, Optional, cast

from nuscout.utils.logger import get_logger
from nuscout.__version__ import __version__
from nuscout.exceptions import NetworkError
from nuscout.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")

#: Upper bound for a server-requested ``Retry-After`` wait, in seconds.
MAX_RETRY_AFTER = 30.0

_RETRY_AFTER_STATUSES = frozenset({429, 503})


def _retry_after(response: httpx.Response) -> Optional[float]:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return min(max(float(raw), 0.0), MAX_RETRY_AFTER)
    except ValueError:
        # HTTP-date form; fall back to backoff
        return None


class HTTPClient:
    """Shared async HTTP client with retries and a concurrency cap.

    Args:
        timeout: Per-request timeout in seconds.
        max_retries: Retries after the first attempt.
        verify_ssl: Verify TLS certificates.
        user_agent: ``User-Agent`` header; defaults to ``nuscout/<version>``.
        max_concurrency: Requests allowed in flight at once.

    Example:
        >>> async with HTTPClient(timeout=10) as client:
        ...     index = await client.get_json("https://api.nuget.org/v3/index.json")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = 10,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency

        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def __aenter__(self) -> "HTTPClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _backoff(self, attempt: int) -> float:
        return (2**attempt) + random.uniform(0.0, 0.3)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET ``url``, retrying transient failures.

        Keyword arguments are passed to ``httpx.AsyncClient.request``.

        Raises:
            NetworkError: A non-retryable status, or retries exhausted.
        """
        client = self._ensure_client()
        url = url.strip().strip("\"'")
        attempts = self.max_retries + 1
        last_exc: Optional[Exception] = None

        for attempt in range(attempts):
            delay: Optional[float] = None
            try:
                async with self._semaphore:
                    response = await client.request("GET", url, **kwargs)
                response.raise_for_status()
                return response

            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status < 500 and status != 429:
                    raise NetworkError(
                        f"HTTP {status} error for {url}",
                        url=url,
                        status_code=status,
                        response_body=exc.response.text,
                    ) from exc
                last_exc = exc
                if status in _RETRY_AFTER_STATUSES:
                    delay = _retry_after(exc.response)
                logger.warning("HTTP %d (%d/%d): %s", status, attempt + 1, attempts, url)

            except httpx.TimeoutException as exc:
                last_exc = exc
                logger.warning("Timeout (%d/%d): %s", attempt + 1, attempts, url)

            except httpx.TransportError as exc:
                last_exc = exc
                logger.warning("Network error (%d/%d): %s", attempt + 1, attempts, exc)

            if attempt + 1 < attempts:
                if delay is None:
                    delay = self._backoff(attempt)
                logger.debug("Retrying %s in %.2fs", url, delay)
                await asyncio.sleep(delay)

        raise NetworkError(
            f"Request failed after {attempts} attempts: {url}",
            url=url,
            status_code=getattr(getattr(last_exc, "response", None), "status_code", None),
        ) from last_exc

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """GET ``url`` and decode a JSON object body.

        Raises:
            NetworkError: The request failed, or the body is not a JSON object.
        """
        response = await self.get(url, **kwargs)

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise NetworkError(
                f"Expected JSON object from {url}",
                url=url,
                response_body=response.text,
            )

        return cast(Dict[str, Any], data)
