"""
HTTP Client

Provides a small async HTTP client used to deliver challenges to agents.
Wraps httpx so transports can be swapped (e.g. httpx.MockTransport in tests).
"""

from __future__ import annotations

import json as _json
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx


@dataclass
class HttpResponse:
    """
    Response from an HTTP request.
    """
    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        """Check if request was successful (2xx status)."""
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """Get response content as text."""
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Parse response as JSON."""
        return _json.loads(self.content)

    def raise_for_status(self) -> None:
        """Raise exception if status is not 2xx."""
        if not self.ok:
            raise HttpError(
                f"HTTP {self.status_code}",
                status_code=self.status_code,
                response=self,
            )


class HttpError(Exception):
    """HTTP request error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[HttpResponse] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class AsyncHttpClient:
    """
    Async HTTP client.

    Usage:
        async with AsyncHttpClient(timeout=5.0) as client:
            response = await client.post(url, json=payload)
            if response.ok:
                data = response.json()
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        default_headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize HTTP client.

        Args:
            timeout: Default request timeout in seconds
            default_headers: Headers to include in all requests
            transport: Optional httpx transport (mock transports in tests)
        """
        self.timeout = timeout
        self.default_headers = default_headers or {}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Lazy-create the underlying httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self.default_headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        json: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """
        Make an HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            headers: Additional headers
            json: Request body (JSON)
            timeout: Request timeout in seconds

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            HttpError: On any transport-level failure (connect, read, timeout)
        """
        client = self._get_client()
        effective_timeout = timeout if timeout is not None else self.timeout

        started = time.monotonic()
        try:
            response = await client.request(
                method,
                url,
                headers=headers,
                json=json,
                timeout=effective_timeout,
            )
        except httpx.TimeoutException as e:
            raise HttpError(f"Timed out after {effective_timeout:.3f}s: {url}") from e
        except httpx.HTTPError as e:
            raise HttpError(f"{type(e).__name__}: {e}") from e

        return HttpResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
            url=str(response.url),
            elapsed_ms=(time.monotonic() - started) * 1000,
        )

    async def get(
        self,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """Make a GET request."""
        return await self.request("GET", url, headers=headers, timeout=timeout)

    async def post(
        self,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        json: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """Make a POST request."""
        return await self.request("POST", url, headers=headers, json=json, timeout=timeout)

    async def close(self) -> None:
        """Close the underlying client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()
