"""Instrumented async REST client with auto-timing, validation and metric emission."""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import aiohttp

from storeload._internal.errors import ApiError
from storeload._internal.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from storeload._internal.types import JsonBody

logger = get_logger("client.http")

# Expected status per method when the caller does not say otherwise.
_DEFAULT_EXPECTED_STATUS: dict[str, int] = {
    "GET": 200,
    "POST": 201,
    "PUT": 200,
    "PATCH": 200,
    "DELETE": 200,
}


def _noop_callback(metric: RequestMetric) -> None:
    """Default no-op metric callback."""


@dataclass
class RequestMetric:
    """Raw metric emitted for every HTTP request.

    Attributes:
        timestamp: Monotonic timestamp when the request started.
        name: Logical name for metric grouping (e.g., "GET /products").
        method: HTTP method (GET, POST, etc.).
        url: Full request URL.
        status_code: HTTP response status code (0 if the request failed).
        latency_ms: Response time in milliseconds.
        content_length: Response body size in bytes.
        error: Transport error message, None when a response arrived.
        check_failed: True when a response arrived but failed validation
            (unexpected status or an empty/invalid JSON body).
        user_id: Virtual user that made the request.
    """

    timestamp: float
    name: str
    method: str
    url: str
    status_code: int
    latency_ms: float
    content_length: int
    error: str | None = None
    check_failed: bool = False
    user_id: int = 0

    @property
    def is_error(self) -> bool:
        """Return True if the request counts towards the error rate."""
        return self.error is not None or self.check_failed or self.status_code >= 400


@dataclass(frozen=True)
class ApiResponse:
    """Decoded response handed back to resource wrappers.

    Attributes:
        status: HTTP status code.
        body: Decoded JSON body, or None for an empty/non-JSON body.
        latency_ms: Response time in milliseconds.
        ok: True if the response passed validation.
    """

    status: int
    body: JsonBody
    latency_ms: float
    ok: bool


@dataclass(frozen=True)
class BatchRequest:
    """One entry of a :meth:`HttpClient.batch` call."""

    method: str
    path: str
    name: str | None = None


class HttpClient:
    """Instrumented async REST client wrapping ``aiohttp.ClientSession``.

    Every request is timed, validated against an expected status and a
    non-empty JSON body, and reported as a ``RequestMetric`` through
    ``metric_callback``. Validation failures do not raise: the response is
    returned with ``ok=False``. Transport failures raise ``ApiError`` after
    the metric has been emitted.

    Attributes:
        base_url: Base URL prepended to all request paths.
        headers: Mutable headers applied to every request. The auth wrapper
            stores the bearer token here.
    """

    def __init__(
        self,
        base_url: str,
        headers: Mapping[str, str] | None = None,
        metric_callback: Callable[[RequestMetric], None] | None = None,
        user_id: int = 0,
        timeout: float = 30.0,
        pool_size: int = 100,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Base URL prepended to all request paths.
            headers: Default headers applied to every request.
            metric_callback: Callback invoked with a ``RequestMetric``
                after each request. Defaults to a no-op.
            user_id: Virtual user identifier for metric tagging.
            timeout: Request timeout in seconds.
            pool_size: Connection limit of the underlying connector.
        """
        self.base_url = base_url.rstrip("/")
        self.headers: dict[str, str] = dict(headers or {})
        self._metric_callback = metric_callback or _noop_callback
        self._user_id = user_id
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._pool_size = pool_size
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HttpClient:
        """Open the underlying aiohttp session."""
        self._session = aiohttp.ClientSession(
            timeout=self._timeout,
            connector=aiohttp.TCPConnector(limit=self._pool_size),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def get(
        self,
        path: str,
        *,
        params: Mapping[str, str | int | float] | None = None,
        name: str | None = None,
        expected_status: int | None = None,
    ) -> ApiResponse:
        """Send a GET request."""
        return await self._request(
            "GET", path, params=params, name=name, expected_status=expected_status
        )

    async def post(
        self,
        path: str,
        *,
        json_body: object = None,
        name: str | None = None,
        expected_status: int | None = None,
    ) -> ApiResponse:
        """Send a POST request with a JSON body."""
        return await self._request(
            "POST", path, json_body=json_body, name=name, expected_status=expected_status
        )

    async def put(
        self,
        path: str,
        *,
        json_body: object = None,
        name: str | None = None,
        expected_status: int | None = None,
    ) -> ApiResponse:
        """Send a PUT request with a JSON body."""
        return await self._request(
            "PUT", path, json_body=json_body, name=name, expected_status=expected_status
        )

    async def patch(
        self,
        path: str,
        *,
        json_body: object = None,
        name: str | None = None,
        expected_status: int | None = None,
    ) -> ApiResponse:
        """Send a PATCH request with a JSON body."""
        return await self._request(
            "PATCH", path, json_body=json_body, name=name, expected_status=expected_status
        )

    async def delete(
        self,
        path: str,
        *,
        name: str | None = None,
        expected_status: int | None = None,
    ) -> ApiResponse:
        """Send a DELETE request."""
        return await self._request("DELETE", path, name=name, expected_status=expected_status)

    async def batch(self, requests: Sequence[BatchRequest]) -> list[ApiResponse]:
        """Send several requests concurrently and return responses in order.

        Args:
            requests: Requests to issue. Paths are relative to ``base_url``.

        Returns:
            One ``ApiResponse`` per request, in the order given.

        Raises:
            ApiError: If any request fails at the transport level.
        """
        return list(
            await asyncio.gather(
                *(self._request(r.method.upper(), r.path, name=r.name) for r in requests)
            )
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str | int | float] | None = None,
        json_body: object = None,
        headers: Mapping[str, str] | None = None,
        name: str | None = None,
        expected_status: int | None = None,
    ) -> ApiResponse:
        """Send an HTTP request with auto-timing, validation and metric emission.

        Cancellation propagates without emitting a metric, so users stopped
        mid-request do not count towards latency or the error rate.

        Raises:
            RuntimeError: If the client is used outside of an async context
                manager.
            ApiError: On connection errors and timeouts.
        """
        if self._session is None:
            msg = "HttpClient must be used as an async context manager"
            raise RuntimeError(msg)

        url = f"{self.base_url}{path}"
        metric_name = name or f"{method} {path.split('?', 1)[0]}"
        merged_headers = {**self.headers, **(headers or {})}
        expected = expected_status or _DEFAULT_EXPECTED_STATUS.get(method, 200)

        start = time.monotonic()
        status_code = 0
        content_length = 0
        error: str | None = None
        body: JsonBody = None
        checks_passed = False
        cancelled = False

        try:
            async with self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=merged_headers,
            ) as resp:
                status_code = resp.status
                raw = await resp.read()
            content_length = len(raw)
            is_json, body = _decode_json(raw)
            checks_passed = status_code == expected and (expected == 204 or is_json)
        except asyncio.CancelledError:
            cancelled = True
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            error = f"{type(exc).__name__}: {exc}"
            msg = f"{method} {url} failed: {error}"
            raise ApiError(msg) from exc
        finally:
            latency_ms = (time.monotonic() - start) * 1000
            # A cancelled request never got a response; it is not a sample.
            if cancelled:
                logger.debug("%s cancelled after %.1fms", metric_name, latency_ms)
            else:
                self._metric_callback(
                    RequestMetric(
                        timestamp=start,
                        name=metric_name,
                        method=method,
                        url=url,
                        status_code=status_code,
                        latency_ms=latency_ms,
                        content_length=content_length,
                        error=error,
                        check_failed=error is None and not checks_passed,
                        user_id=self._user_id,
                    )
                )

        if not checks_passed:
            logger.debug(
                "%s - checks failed: status=%d expected=%d duration=%.1fms body_length=%d",
                metric_name,
                status_code,
                expected,
                latency_ms,
                content_length,
            )

        return ApiResponse(
            status=status_code,
            body=body,
            latency_ms=latency_ms,
            ok=checks_passed,
        )


def _decode_json(raw: bytes) -> tuple[bool, JsonBody]:
    """Decode a response body.

    Returns:
        ``(is_json, body)``. *is_json* is False for an empty or malformed
        body. *body* is None unless the document is an object or array, so
        a bare ``true`` from a delete endpoint is valid but carries no body.
    """
    if not raw:
        return False, None
    try:
        decoded = json.loads(raw)
    except ValueError:
        return False, None
    if isinstance(decoded, dict | list):
        return True, decoded
    return True, None
