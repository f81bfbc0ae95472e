"""Redirect following: policy, classification, request rebuilding and the handler."""

from waypoint.redirect.classifier import REDIRECT_STATUS_CODES, is_redirect
from waypoint.redirect.handler import RedirectHandler
from waypoint.redirect.policy import (
    ABSOLUTE_MAX_REDIRECTS,
    DEFAULT_MAX_REDIRECTS,
    RedirectPolicy,
    RedirectPredicate,
    resolve_policy,
)
from waypoint.redirect.predicates import all_of, deny_scheme_downgrade, same_host_only
from waypoint.redirect.rebuild import build_next_request, resolve_location

__all__ = [
    "ABSOLUTE_MAX_REDIRECTS",
    "DEFAULT_MAX_REDIRECTS",
    "REDIRECT_STATUS_CODES",
    "RedirectHandler",
    "RedirectPolicy",
    "RedirectPredicate",
    "all_of",
    "build_next_request",
    "deny_scheme_downgrade",
    "is_redirect",
    "resolve_location",
    "resolve_policy",
    "same_host_only",
]
