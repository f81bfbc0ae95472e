# src/waypoint/redirect/predicates.py
"""Reusable should_redirect predicates.

Each predicate receives the request that got the redirect and the redirect
response, and returns True to follow. A Location that cannot be resolved
is declined here so the handler returns the redirect response as-is.
"""

from __future__ import annotations

from waypoint.contracts.errors import MalformedRedirectTarget
from waypoint.contracts.http import Request, Response
from waypoint.redirect.policy import RedirectPredicate
from waypoint.redirect.rebuild import resolve_location, url_authority


def deny_scheme_downgrade(request: Request, response: Response) -> bool:
    """Decline redirects from https to plain http."""
    try:
        target = resolve_location(request.url, response.location)
    except MalformedRedirectTarget:
        return False
    return not (request.url.scheme == "https" and target.scheme == "http")


def same_host_only(request: Request, response: Response) -> bool:
    """Decline redirects that leave the originating host and port."""
    try:
        target = resolve_location(request.url, response.location)
    except MalformedRedirectTarget:
        return False
    return url_authority(request.url).lower() == url_authority(target).lower()


def all_of(*predicates: RedirectPredicate) -> RedirectPredicate:
    """Combine predicates; the redirect is followed only if all allow it.

    Evaluation stops at the first predicate that declines.
    """

    def _combined(request: Request, response: Response) -> bool:
        return all(predicate(request, response) for predicate in predicates)

    return _combined
