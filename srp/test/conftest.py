from __future__ import annotations

import pytest

from srp.core.config import (
    ENV_BASE_URL,
    ENV_DAYS_TO_KEEP,
    ENV_ORGANIZATION,
    ENV_PORT,
    ENV_PROJECT,
    ENV_TIMEOUT_SECONDS,
    ENV_TOKEN,
)

_SENTRY_ENV = (
    ENV_BASE_URL,
    ENV_PORT,
    ENV_TOKEN,
    ENV_ORGANIZATION,
    ENV_PROJECT,
    ENV_DAYS_TO_KEEP,
    ENV_TIMEOUT_SECONDS,
)


@pytest.fixture(autouse=True)
def clean_sentry_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without SENTRY_* variables.

    setenv first so monkeypatch also removes values a test loads from a .env file.
    """
    for key in _SENTRY_ENV:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
