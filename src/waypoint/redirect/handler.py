# src/waypoint/redirect/handler.py
"""Redirect-following middleware.

The handler forwards a request down the pipeline and, while the response
is a followable redirect, rebuilds the request for the Location target and
forwards again. The loop ends when:
- the response is not a redirect (returned)
- the policy predicate declines the hop (redirect response returned)
- the hop cap is reached (redirect response returned, not an error)
- the pipeline or the rebuild raises (propagated unchanged)

Hop counting is local to one intercept() call. Nothing about an
in-flight chain is stored on the handler, so one instance can serve any
number of concurrent callers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from waypoint.contracts.http import Request, RequestOptions, Response
from waypoint.redirect.classifier import is_redirect
from waypoint.redirect.policy import RedirectPolicy, resolve_policy
from waypoint.redirect.rebuild import build_next_request, loggable_url

if TYPE_CHECKING:
    from waypoint.pipeline.protocols import Pipeline

logger = structlog.get_logger(__name__)


class RedirectHandler:
    """Middleware that follows 301/302/303/307/308 redirects.

    Example:
        handler = RedirectHandler(RedirectPolicy(max_redirects=10))
        pipeline = MiddlewarePipeline(HttpxTransport(), [handler])

        # Per-call override: this call follows at most two hops
        pipeline.send(request, options=RequestOptions(redirect_policy=RedirectPolicy(max_redirects=2)))
    """

    def __init__(self, policy: RedirectPolicy | None = None) -> None:
        """Initialize the handler.

        Args:
            policy: Default policy for calls without an override. None gives
                the default policy (always follow, at most 5 hops).
        """
        self._policy = policy if policy is not None else RedirectPolicy()

    @property
    def policy(self) -> RedirectPolicy:
        return self._policy

    def intercept(
        self,
        pipeline: Pipeline,
        request: Request,
        options: RequestOptions | None = None,
    ) -> Response:
        """Send a request and follow redirects according to the effective policy.

        Args:
            pipeline: Remaining pipeline stages
            request: Original request
            options: Per-call options; options.redirect_policy overrides the
                handler's default for this call only

        Returns:
            The final non-redirect response, the redirect response at which
            the predicate declined, or the last redirect response when the
            hop cap was reached

        Raises:
            TransportError: Propagated from the pipeline, at any hop
            InvalidRedirectInput: If the rebuild inputs are missing
            MalformedRedirectTarget: If a Location cannot be resolved; its
                response attribute holds the redirect response
        """
        response = pipeline.next(request)

        policy = resolve_policy(self._policy, options.redirect_policy if options is not None else None)
        max_redirects = policy.effective_max_redirects
        hops = 0

        while is_redirect(response):
            if hops >= max_redirects:
                logger.debug(
                    "redirect_limit_reached",
                    max_redirects=max_redirects,
                    status_code=response.status_code,
                    url=loggable_url(request.url),
                )
                break
            if not policy.allows(request, response):
                logger.debug(
                    "redirect_declined",
                    hop=hops + 1,
                    status_code=response.status_code,
                    url=loggable_url(request.url),
                )
                break

            hops += 1
            next_request = build_next_request(request, response)
            logger.debug(
                "redirect_followed",
                hop=hops,
                status_code=response.status_code,
                method=next_request.method,
                redirect_from=loggable_url(request.url),
                redirect_to=loggable_url(next_request.url),
            )

            response = pipeline.next(next_request)
            request = next_request

        return response
