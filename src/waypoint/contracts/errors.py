# src/waypoint/contracts/errors.py
"""Exception hierarchy for pipeline and redirect failures.

Every error may carry the best response snapshot available when it was
raised, so callers can inspect what the server last said even when the
chain failed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from waypoint.contracts.http import Response


class WaypointError(Exception):
    """Base class for errors raised by waypoint.

    Attributes:
        response: Last response obtained before the failure, if any
    """

    def __init__(self, message: str, *, response: Response | None = None) -> None:
        super().__init__(message)
        self.response = response


class RedirectError(WaypointError):
    """Building the request for the next redirect hop failed."""

    pass


class InvalidRedirectInput(RedirectError):
    """The originating request or the redirect response was missing."""

    pass


class MalformedRedirectTarget(RedirectError):
    """The Location header could not be turned into an absolute URL.

    Attributes:
        location: The raw Location header value (None if it was missing)
    """

    def __init__(
        self,
        message: str,
        *,
        location: str | None,
        response: Response | None = None,
    ) -> None:
        super().__init__(message, response=response)
        self.location = location


class TransportError(WaypointError):
    """The transport failed to produce a response.

    Raised by transports; the redirect handler propagates it unchanged and
    never inspects it. The underlying library exception is chained as
    __cause__.
    """

    pass
