"""Prune stale releases from a Sentry server."""

__version__ = "0.1.0"
