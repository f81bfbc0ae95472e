# src/waypoint/redirect/policy.py
"""Redirect policy: which redirects to follow and how many.

A policy is immutable once built. The handler keeps one as its default;
callers may supply another for a single call through RequestOptions. The
effective policy is resolved once per top-level call and shared by every
hop of that chain.
"""

from collections.abc import Callable

from pydantic import BaseModel, Field

from waypoint.contracts.http import Request, Response

DEFAULT_MAX_REDIRECTS = 5
ABSOLUTE_MAX_REDIRECTS = 20

RedirectPredicate = Callable[[Request, Response], bool]


class RedirectPolicy(BaseModel):
    """Immutable redirect configuration.

    The configured max_redirects is kept as given; effective_max_redirects
    is what the redirect loop enforces:
    - unset or below 1: DEFAULT_MAX_REDIRECTS (5)
    - above ABSOLUTE_MAX_REDIRECTS: ABSOLUTE_MAX_REDIRECTS (20)
    - otherwise unchanged

    Example:
        policy = RedirectPolicy(
            should_redirect=lambda request, response: response.status_code != 308,
            max_redirects=10,
        )
    """

    model_config = {"frozen": True}

    should_redirect: RedirectPredicate | None = Field(
        default=None,
        description="Called with (request, response) before each hop; None means always follow",
    )
    max_redirects: int | None = Field(
        default=DEFAULT_MAX_REDIRECTS,
        description="Maximum hops per chain (clamped to 1..20, invalid values mean 5)",
    )

    @property
    def effective_max_redirects(self) -> int:
        if self.max_redirects is None or self.max_redirects < 1:
            return DEFAULT_MAX_REDIRECTS
        if self.max_redirects > ABSOLUTE_MAX_REDIRECTS:
            return ABSOLUTE_MAX_REDIRECTS
        return self.max_redirects

    def allows(self, request: Request, response: Response) -> bool:
        """Evaluate the predicate for one hop (absent predicate allows)."""
        if self.should_redirect is None:
            return True
        return self.should_redirect(request, response)


def resolve_policy(default: RedirectPolicy, override: RedirectPolicy | None) -> RedirectPolicy:
    """Return the policy governing one top-level call: override wins."""
    if override is not None:
        return override
    return default
