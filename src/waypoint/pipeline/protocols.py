# src/waypoint/pipeline/protocols.py
"""Protocols connecting middleware, pipelines and transports.

A Transport is the only I/O boundary: it turns a Request into a Response
or raises TransportError. Middleware sits in front of it and reaches the
rest of the chain through a Pipeline handle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from waypoint.contracts.http import Request, RequestOptions, Response


@runtime_checkable
class Pipeline(Protocol):
    """Handle to the remaining stages of a middleware chain.

    next() may be called more than once per top-level call (for example
    once per redirect hop). Failures propagate as exceptions.
    """

    def next(self, request: Request) -> Response: ...


@runtime_checkable
class Middleware(Protocol):
    """A pipeline stage that may inspect, replace or repeat requests."""

    def intercept(self, pipeline: Pipeline, request: Request, options: RequestOptions) -> Response: ...


@runtime_checkable
class Transport(Protocol):
    """Sends a single request over the network without following redirects."""

    def send(self, request: Request) -> Response: ...

    def close(self) -> None: ...
