# src/waypoint/redirect/rebuild.py
"""Build the request for the next redirect hop.

Rules applied, in order:
1. Resolve Location against the originating request. A value beginning
   with "/" is appended to the originating scheme and authority verbatim;
   anything else goes through RFC 3986 reference resolution.
2. Copy the originating request and point it at the resolved target.
3. Drop Authorization when the scheme or authority changes. This compares
   each hop's own originating request to its target, so credentials that
   survived hop N are still dropped if hop N+1 leaves the origin.
4. On 303 only: switch to GET, drop Content-Type/Content-Length, clear the
   body. 301 and 302 keep the method and body untouched.
"""

from __future__ import annotations

from http import HTTPStatus

import httpx
import structlog

from waypoint.contracts.errors import InvalidRedirectInput, MalformedRedirectTarget
from waypoint.contracts.http import (
    AUTHORIZATION_HEADER,
    CONTENT_LENGTH_HEADER,
    CONTENT_TYPE_HEADER,
    Request,
    Response,
)

logger = structlog.get_logger(__name__)


def url_authority(url: httpx.URL) -> str:
    # netloc is host[:port], lowercased and IDNA-encoded; default ports are
    # already normalized away, and IPv6 hosts keep their brackets.
    return url.netloc.decode("ascii")


def loggable_url(url: httpx.URL) -> str:
    """Render a URL for logs without userinfo or query string."""
    return f"{url.scheme}://{url_authority(url)}{url.path}"


def resolve_location(
    base: httpx.URL,
    location: str | None,
    *,
    response: Response | None = None,
) -> httpx.URL:
    """Resolve a Location header value against the originating URL.

    Args:
        base: URL of the request that received the redirect
        location: Raw Location header value
        response: Redirect response, attached to any error raised

    Returns:
        Absolute target URL

    Raises:
        MalformedRedirectTarget: If location is missing, unparseable, or does
            not resolve to a URL with both scheme and host
    """
    if not location:
        raise MalformedRedirectTarget(
            "Redirect response has no Location header",
            location=location,
            response=response,
        )

    try:
        if location.startswith("/"):
            target = httpx.URL(f"{base.scheme}://{url_authority(base)}{location}")
        else:
            target = base.join(location)
    except (httpx.InvalidURL, ValueError) as e:
        raise MalformedRedirectTarget(
            f"Cannot parse redirect target {location!r}: {e}",
            location=location,
            response=response,
        ) from e

    if not target.scheme or not target.host:
        raise MalformedRedirectTarget(
            f"Redirect target {location!r} is not an absolute URL",
            location=location,
            response=response,
        )
    return target


def is_same_origin(source: httpx.URL, target: httpx.URL) -> bool:
    """Case-insensitive comparison of scheme and authority."""
    same_host = url_authority(source).lower() == url_authority(target).lower()
    same_scheme = source.scheme.lower() == target.scheme.lower()
    return same_host and same_scheme


def build_next_request(request: Request | None, response: Response | None) -> Request:
    """Produce the request for the next hop of a redirect chain.

    The originating request is never modified; a new Request is returned.

    Args:
        request: Request that received the redirect response
        response: The redirect response

    Returns:
        Request targeting the resolved Location

    Raises:
        InvalidRedirectInput: If request or response is None
        MalformedRedirectTarget: If Location cannot be resolved
    """
    if request is None or response is None:
        raise InvalidRedirectInput(
            "Cannot build redirect request: request or response is missing",
            response=response,
        )

    target = resolve_location(request.url, response.location, response=response)
    next_request = request.with_url(target)

    if not is_same_origin(request.url, target):
        if AUTHORIZATION_HEADER in next_request.headers:
            logger.debug(
                "redirect_authorization_stripped",
                redirect_from=loggable_url(request.url),
                redirect_to=loggable_url(target),
            )
        next_request = next_request.without_headers(AUTHORIZATION_HEADER)

    if response.status_code == HTTPStatus.SEE_OTHER:
        next_request = next_request.with_method("GET").without_headers(CONTENT_TYPE_HEADER, CONTENT_LENGTH_HEADER).without_body()

    return next_request
