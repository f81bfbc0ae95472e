# tests/fixtures/__init__.py
"""Shared test helpers for waypoint tests."""

from tests.fixtures.transports import ScriptedTransport, make_response, ok, redirect

__all__ = [
    "ScriptedTransport",
    "make_response",
    "ok",
    "redirect",
]
