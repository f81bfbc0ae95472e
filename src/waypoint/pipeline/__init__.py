"""Middleware pipeline and transports."""

from waypoint.pipeline.chain import MiddlewarePipeline
from waypoint.pipeline.protocols import Middleware, Pipeline, Transport
from waypoint.pipeline.transport import HttpxTransport

__all__ = [
    "HttpxTransport",
    "Middleware",
    "MiddlewarePipeline",
    "Pipeline",
    "Transport",
]
