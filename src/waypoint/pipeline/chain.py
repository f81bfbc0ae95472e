# src/waypoint/pipeline/chain.py
"""Middleware chain terminated by a transport."""

from __future__ import annotations

from collections.abc import Sequence
from types import TracebackType

from waypoint.contracts.http import Request, RequestOptions, Response
from waypoint.pipeline.protocols import Middleware, Pipeline, Transport


class _Stage:
    """Pipeline handle positioned at one index of the middleware list.

    Holds no mutable state, so the same handle can forward any number of
    requests (one per redirect hop).
    """

    def __init__(
        self,
        middlewares: Sequence[Middleware],
        index: int,
        transport: Transport,
        options: RequestOptions,
    ) -> None:
        self._middlewares = middlewares
        self._index = index
        self._transport = transport
        self._options = options

    def next(self, request: Request) -> Response:
        if self._index >= len(self._middlewares):
            return self._transport.send(request)
        downstream = _Stage(self._middlewares, self._index + 1, self._transport, self._options)
        return self._middlewares[self._index].intercept(downstream, request, self._options)


class MiddlewarePipeline:
    """Runs requests through middlewares in order, then the transport.

    Example:
        with MiddlewarePipeline(HttpxTransport(), [RedirectHandler()]) as pipeline:
            response = pipeline.send(Request.build("GET", "https://example.com/"))

    Thread Safety:
        The pipeline holds only its middleware list and transport. Per-call
        state lives in the stage handles created for each send().
    """

    def __init__(self, transport: Transport, middlewares: Sequence[Middleware] = ()) -> None:
        self._transport = transport
        self._middlewares = tuple(middlewares)

    @property
    def middlewares(self) -> tuple[Middleware, ...]:
        return self._middlewares

    def send(self, request: Request, *, options: RequestOptions | None = None) -> Response:
        """Send a request through the whole chain.

        Args:
            request: Request to send
            options: Per-call options (e.g. a redirect policy override)

        Returns:
            Response produced by the chain

        Raises:
            TransportError: If the transport fails
            RedirectError: If a redirect target cannot be built
        """
        return self.entry(options).next(request)

    def entry(self, options: RequestOptions | None = None) -> Pipeline:
        """Pipeline handle for the first stage, bound to the given options."""
        return _Stage(self._middlewares, 0, self._transport, options or RequestOptions())

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> MiddlewarePipeline:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
