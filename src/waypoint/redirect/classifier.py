# src/waypoint/redirect/classifier.py
"""Classify responses as followable redirects."""

from http import HTTPStatus

from waypoint.contracts.http import Response

REDIRECT_STATUS_CODES: frozenset[int] = frozenset(
    {
        HTTPStatus.MOVED_PERMANENTLY,  # 301
        HTTPStatus.FOUND,  # 302
        HTTPStatus.SEE_OTHER,  # 303
        HTTPStatus.TEMPORARY_REDIRECT,  # 307
        HTTPStatus.PERMANENT_REDIRECT,  # 308
    }
)


def is_redirect(response: Response | None) -> bool:
    """Return True if the response is a redirect worth considering.

    Only 301, 302, 303, 307 and 308 qualify, and only with a non-empty
    Location header. 300 and 304-306 are never redirects here, whatever
    headers they carry.
    """
    if response is None:
        return False
    if response.location is None:
        return False
    return response.status_code in REDIRECT_STATUS_CODES
