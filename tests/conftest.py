"""Shared pytest configuration for plex_updater tests."""

from __future__ import annotations

import pytest

_ENV_VARS = (
    "CONTAINER_NAME",
    "PLEX_CHANNEL",
    "PLEX_TOKEN",
    "PLEX_HOST",
    "PLEX_PORT",
    "PLEX_PLATFORM",
    "RELEASE_FEED_URL",
    "HTTP_TIMEOUT",
    "RESTART_TIMEOUT",
    "DOCKER_BINARY",
    "SLEEP_INTERVAL",
    "MAX_ATTEMPTS",
    "LOCK_FILE",
    "LOG_FILE",
    "LOG_LEVEL",
    "ENVIRONMENT",
    "FAIL_ON_RESTART_ERROR",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host environment out of Settings during tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
