# tests/conftest.py
"""Shared test fixtures and Hypothesis configuration.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import logging
import os

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

from waypoint.contracts import Request

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo configure_logging() calls made by a test."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    structlog.reset_defaults()
    root.handlers = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def authorized_post() -> Request:
    """POST with credentials and a JSON body, the worst case for redirect rebuilding."""
    return Request.build(
        "POST",
        "https://a.example/x",
        headers={
            "Authorization": "Bearer T",
            "Content-Type": "application/json",
            "Content-Length": "13",
            "X-Trace": "abc",
        },
        body=b'{"key": "v1"}',
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: end-to-end chains through the httpx transport")
