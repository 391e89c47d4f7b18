"""Typed configuration loading and validation.

Settings come from the process environment (optionally seeded from a
``.env`` file by the CLI). They are parsed once into an immutable
:class:`Config` and validated eagerly, so a bad setting stops the run before
any network call is made.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit

from .result import Err, Ok, Result

__all__ = [
    "Config",
    "ConfigError",
    "load_config",
    "validate_config",
    "DEFAULT_TIMEOUT_SECONDS",
    # Environment variable names
    "ENV_BASE_URL",
    "ENV_PORT",
    "ENV_TOKEN",
    "ENV_ORGANIZATION",
    "ENV_PROJECT",
    "ENV_DAYS_TO_KEEP",
    "ENV_TIMEOUT_SECONDS",
]

# -----------------------------------------------------------------------------
# Environment variables
# -----------------------------------------------------------------------------

ENV_BASE_URL = "SENTRY_BASE_URL"
ENV_PORT = "SENTRY_PORT"
ENV_TOKEN = "SENTRY_TOKEN"
ENV_ORGANIZATION = "SENTRY_ORGANIZATION"
ENV_PROJECT = "SENTRY_PROJECT"
ENV_DAYS_TO_KEEP = "SENTRY_DAYS_TO_KEEP"
ENV_TIMEOUT_SECONDS = "SENTRY_TIMEOUT_SECONDS"

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration is missing or invalid.

    Attributes:
        message: Human-readable description
        key: Environment variable at fault, if a single one is
    """

    message: str
    key: str | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Settings for one pruning run.

    Attributes:
        base_url: Sentry server URL (e.g. "https://sentry.example.com"), no port if port is set
        token: API auth token, sent as a Bearer token
        organization: Organization slug owning the releases
        days_to_keep: Releases older than this many days are deleted
        port: Optional port appended to base_url
        project: Optional project filter; None matches every release
        timeout_seconds: Per-request timeout
    """

    base_url: str
    token: str
    organization: str
    days_to_keep: float
    port: int | None = None
    project: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def server_url(self) -> str:
        """Base URL with the configured port, without trailing slash."""
        base = self.base_url.rstrip("/")
        if self.port is not None:
            return f"{base}:{self.port}"
        return base

    @property
    def releases_url(self) -> str:
        """Listing endpoint for the organization's releases."""
        return f"{self.server_url}/api/0/organizations/{self.organization}/releases/"


def _env_str(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    s = value.strip()
    return s or None


def _parse_positive_float(raw: str, key: str) -> Result[float, ConfigError]:
    try:
        value = float(raw)
    except ValueError:
        return Err(ConfigError(f"{key} must be a number, got {raw!r}", key=key))
    if not math.isfinite(value) or value <= 0:
        return Err(ConfigError(f"{key} must be a positive number, got {raw!r}", key=key))
    return Ok(value)


def _parse_port(raw: str) -> Result[int, ConfigError]:
    try:
        port = int(raw)
    except ValueError:
        return Err(ConfigError(f"{ENV_PORT} must be an integer, got {raw!r}", key=ENV_PORT))
    if not 1 <= port <= 65535:
        return Err(ConfigError(f"{ENV_PORT} out of range: {port}", key=ENV_PORT))
    return Ok(port)


def validate_config(config: Config) -> Result[Config, ConfigError]:
    """Check the invariants every run depends on.

    Required values must be non-empty, the day threshold and timeout must be
    finite positive numbers and the port, when set, must be a valid TCP port.
    """
    missing = [
        key
        for key, value in (
            (ENV_BASE_URL, config.base_url),
            (ENV_TOKEN, config.token),
            (ENV_ORGANIZATION, config.organization),
        )
        if not value.strip()
    ]
    if missing:
        return Err(
            ConfigError(
                "Environment variables not set correctly: missing " + ", ".join(missing),
                key=missing[0] if len(missing) == 1 else None,
            )
        )

    parts = urlsplit(config.base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return Err(
            ConfigError(
                f"{ENV_BASE_URL} must be an http(s) URL, got {config.base_url!r}",
                key=ENV_BASE_URL,
            )
        )

    try:
        base_port = parts.port
    except ValueError:
        return Err(
            ConfigError(f"{ENV_BASE_URL} has an invalid port: {config.base_url!r}", key=ENV_BASE_URL)
        )
    if base_port is not None and config.port is not None:
        return Err(
            ConfigError(
                f"{ENV_BASE_URL} already includes port {base_port}; unset {ENV_PORT} "
                "or remove the port from the URL",
                key=ENV_PORT,
            )
        )

    if not math.isfinite(config.days_to_keep) or config.days_to_keep <= 0:
        return Err(
            ConfigError(
                f"{ENV_DAYS_TO_KEEP} must be a positive number, got {config.days_to_keep!r}",
                key=ENV_DAYS_TO_KEEP,
            )
        )

    if config.port is not None and not 1 <= config.port <= 65535:
        return Err(ConfigError(f"{ENV_PORT} out of range: {config.port}", key=ENV_PORT))

    if not math.isfinite(config.timeout_seconds) or config.timeout_seconds <= 0:
        return Err(
            ConfigError(
                f"{ENV_TIMEOUT_SECONDS} must be a positive number", key=ENV_TIMEOUT_SECONDS
            )
        )

    return Ok(config)


def load_config(env: Mapping[str, str]) -> Result[Config, ConfigError]:
    """Build a validated Config from environment variables.

    Args:
        env: Mapping to read from, usually ``os.environ``

    Returns:
        Ok(Config) on success, Err(ConfigError) on the first problem found
    """
    base_url = _env_str(env, ENV_BASE_URL)
    token = _env_str(env, ENV_TOKEN)
    organization = _env_str(env, ENV_ORGANIZATION)
    days_raw = _env_str(env, ENV_DAYS_TO_KEEP)

    missing = [
        key
        for key, value in (
            (ENV_BASE_URL, base_url),
            (ENV_TOKEN, token),
            (ENV_ORGANIZATION, organization),
            (ENV_DAYS_TO_KEEP, days_raw),
        )
        if value is None
    ]
    if missing or base_url is None or token is None or organization is None or days_raw is None:
        return Err(
            ConfigError(
                "Environment variables not set correctly: missing " + ", ".join(missing),
                key=missing[0] if len(missing) == 1 else None,
            )
        )

    days = _parse_positive_float(days_raw, ENV_DAYS_TO_KEEP)
    if isinstance(days, Err):
        return days

    port: int | None = None
    port_raw = _env_str(env, ENV_PORT)
    if port_raw is not None:
        parsed_port = _parse_port(port_raw)
        if isinstance(parsed_port, Err):
            return parsed_port
        port = parsed_port.value

    timeout = DEFAULT_TIMEOUT_SECONDS
    timeout_raw = _env_str(env, ENV_TIMEOUT_SECONDS)
    if timeout_raw is not None:
        parsed_timeout = _parse_positive_float(timeout_raw, ENV_TIMEOUT_SECONDS)
        if isinstance(parsed_timeout, Err):
            return parsed_timeout
        timeout = parsed_timeout.value

    return validate_config(
        Config(
            base_url=base_url,
            token=token,
            organization=organization,
            days_to_keep=days.value,
            port=port,
            project=_env_str(env, ENV_PROJECT),
            timeout_seconds=timeout,
        )
    )
