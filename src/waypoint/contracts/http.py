# src/waypoint/contracts/http.py
"""Immutable HTTP message types passed between pipeline stages.

Requests are values: every modification returns a new Request with its own
copy of the headers, so a caller holding the original never observes the
version rebuilt for a later redirect hop.

URL and header containers are httpx's own types. httpx.URL handles parsing,
normalization and reference resolution; httpx.Headers is ordered,
case-insensitive and multi-valued.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from waypoint.redirect.policy import RedirectPolicy

HeaderInput = Mapping[str, str] | Iterable[tuple[str, str]] | httpx.Headers

LOCATION_HEADER = "Location"
AUTHORIZATION_HEADER = "Authorization"
CONTENT_TYPE_HEADER = "Content-Type"
CONTENT_LENGTH_HEADER = "Content-Length"


@dataclass(frozen=True)
class Request:
    """An outbound HTTP request.

    Attributes:
        method: Upper-case HTTP method
        url: Absolute target URL
        headers: Request headers (treat as read-only; use the with_* methods)
        body: Request body, or None for no body
    """

    method: str
    url: httpx.URL
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes | None = None

    @classmethod
    def build(
        cls,
        method: str,
        url: str | httpx.URL,
        *,
        headers: HeaderInput | None = None,
        body: bytes | str | None = None,
    ) -> Request:
        """Construct a request from loosely-typed inputs.

        Raises:
            httpx.InvalidURL: If url cannot be parsed
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        return cls(
            method=method.upper(),
            url=httpx.URL(url),
            headers=httpx.Headers(headers),
            body=body,
        )

    def copy(self) -> Request:
        """Return an equal request with an independent header container."""
        return replace(self, headers=httpx.Headers(self.headers))

    def with_url(self, url: httpx.URL) -> Request:
        return replace(self, url=url, headers=httpx.Headers(self.headers))

    def with_method(self, method: str) -> Request:
        return replace(self, method=method.upper(), headers=httpx.Headers(self.headers))

    def without_headers(self, *names: str) -> Request:
        """Return a copy with every value of the named headers removed."""
        headers = httpx.Headers(self.headers)
        for name in names:
            if name in headers:
                del headers[name]
        return replace(self, headers=headers)

    def without_body(self) -> Request:
        return replace(self, body=None, headers=httpx.Headers(self.headers))


@dataclass(frozen=True)
class Response:
    """An HTTP response as seen by pipeline stages.

    Attributes:
        status_code: HTTP status code
        headers: Response headers
        body: Fully-read response body
        request: The request that produced this response, when known
    """

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""
    request: Request | None = None

    @property
    def location(self) -> str | None:
        """First Location header value, or None when absent or empty.

        Repeated Location headers are not joined; only the first counts.
        """
        values = self.headers.get_list(LOCATION_HEADER)
        if not values or not values[0]:
            return None
        return values[0]


@dataclass(frozen=True)
class RequestOptions:
    """Per-call options supplied explicitly at the pipeline entry point.

    Attributes:
        redirect_policy: Replaces the redirect handler's default policy for
            this call only. None means use the handler's default.
    """

    redirect_policy: RedirectPolicy | None = None
