"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE: it depends on httpx for URL and header
containers but never on waypoint.core, waypoint.pipeline or
waypoint.redirect at runtime.

Import patterns:
    from waypoint.contracts import Request, Response, RequestOptions
    from waypoint.contracts import TransportError, MalformedRedirectTarget
"""

from waypoint.contracts.errors import (
    InvalidRedirectInput,
    MalformedRedirectTarget,
    RedirectError,
    TransportError,
    WaypointError,
)
from waypoint.contracts.http import (
    AUTHORIZATION_HEADER,
    CONTENT_LENGTH_HEADER,
    CONTENT_TYPE_HEADER,
    LOCATION_HEADER,
    Request,
    RequestOptions,
    Response,
)

__all__ = [
    "AUTHORIZATION_HEADER",
    "CONTENT_LENGTH_HEADER",
    "CONTENT_TYPE_HEADER",
    "LOCATION_HEADER",
    "InvalidRedirectInput",
    "MalformedRedirectTarget",
    "RedirectError",
    "Request",
    "RequestOptions",
    "Response",
    "TransportError",
    "WaypointError",
]
