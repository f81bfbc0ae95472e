# src/waypoint/pipeline/transport.py
"""httpx-backed transport.

Sends exactly one request per call through an httpx transport's
handle_request(). httpx.Client is not used: its send path builds the next
redirect request for every 3xx with a Location, even with
follow_redirects=False, and raises on an unparseable one. At the transport
layer every 3xx comes back as a Response, so the redirect handler sees it.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from types import TracebackType

import httpx
import structlog

from waypoint.contracts.errors import TransportError
from waypoint.contracts.http import Request, Response
from waypoint.redirect.rebuild import loggable_url

logger = structlog.get_logger(__name__)


class HttpxTransport:
    """Transport that sends requests with a shared httpx transport.

    httpx.HTTPTransport is thread-safe; its connection pool is shared by all
    calls made through this transport.

    Example:
        with HttpxTransport(timeout=10.0, headers={"User-Agent": "waypoint"}) as transport:
            response = transport.send(Request.build("GET", "https://example.com/"))
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout: Per-request timeout in seconds
            headers: Default headers for every request; request headers of
                the same name replace them
            transport: Preconfigured httpx transport to use instead of an
                httpx.HTTPTransport. It is closed on close().
        """
        self._timeout = httpx.Timeout(timeout)
        self._headers = httpx.Headers(headers)
        self._transport = transport if transport is not None else httpx.HTTPTransport()

    def _build_httpx_request(self, request: Request) -> httpx.Request:
        defaults = [(name, value) for name, value in self._headers.multi_items() if name not in request.headers]
        return httpx.Request(
            request.method,
            request.url,
            headers=[*defaults, *request.headers.multi_items()],
            content=request.body,
            extensions={"timeout": self._timeout.as_dict()},
        )

    def send(self, request: Request) -> Response:
        """Send one request and read the full response body.

        Raises:
            TransportError: If httpx raises (connect failure, timeout, protocol error)
        """
        httpx_request = self._build_httpx_request(request)

        start = time.perf_counter()
        try:
            httpx_response = self._transport.handle_request(httpx_request)
            try:
                httpx_response.read()
            finally:
                httpx_response.close()
        except httpx.HTTPError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            logger.warning(
                "transport_request_failed",
                method=request.method,
                url=loggable_url(request.url),
                error=str(e),
                error_type=type(e).__name__,
                latency_ms=latency_ms,
            )
            raise TransportError(f"{request.method} {loggable_url(request.url)} failed: {e}") from e

        latency_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "transport_request_completed",
            method=request.method,
            url=loggable_url(request.url),
            status_code=httpx_response.status_code,
            latency_ms=latency_ms,
        )

        return Response(
            status_code=httpx_response.status_code,
            headers=httpx.Headers(httpx_response.headers),
            body=httpx_response.content,
            request=request,
        )

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
