"""
Core pytest configuration for the accesslog test suite.

Shared fixtures (scopes, sinks, pipelines) live in
tests/test_fixtures/request_fixtures.py and are re-exported here so every
test module can use them without importing.
"""

from __future__ import annotations

import logging

# Silence chatty third-party loggers before anything imports them.
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "asyncio",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest

from .test_fixtures.request_fixtures import (  # noqa: F401 - re-exported fixtures
    byte_sink,
    fake,
    make_pipeline,
    scope_factory,
    text_sink,
    tty_sink,
)


@pytest.fixture(autouse=True)
def no_color_env(monkeypatch):
    """Color support must come from the sink, not from the developer's shell."""
    monkeypatch.delenv("NO_COLOR", raising=False)
    yield
