"""Release selection predicates."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from srp.sentry.models import Release

__all__ = ["is_associated_with_project", "is_older_than_days"]


def is_older_than_days(
    threshold_days: float, release: Release, *, now: datetime | None = None
) -> bool:
    """Return True if the release was created more than ``threshold_days`` ago.

    A release exactly ``threshold_days`` old is kept.
    """
    current = now if now is not None else datetime.now(UTC)
    return current - release.date_created > timedelta(days=threshold_days)


def is_associated_with_project(project: str, release: Release) -> bool:
    return project in release.projects
