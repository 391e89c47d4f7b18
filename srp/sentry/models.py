"""Typed views of Sentry release objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from srp.core.result import Err, Ok, Result
from srp.core.structured import as_str_dict, get_list, get_str
from srp.sentry.links import PageCursor

__all__ = ["Page", "Release", "parse_release", "parse_timestamp"]


@dataclass(frozen=True, slots=True)
class Release:
    """A release as listed by the server.

    Attributes:
        version: Unique version string within the organization
        date_created: Creation time, timezone aware
        projects: Identifiers (slug, name, id) of the associated projects
    """

    version: str
    date_created: datetime
    projects: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Page:
    """One page of the release listing."""

    releases: tuple[Release, ...]
    cursor: PageCursor


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def _project_ids(entries: list[object]) -> frozenset[str]:
    ids: set[str] = set()
    for entry in entries:
        if isinstance(entry, str):
            if entry.strip():
                ids.add(entry.strip())
            continue
        project = as_str_dict(entry)
        if project is None:
            continue
        for key in ("slug", "name"):
            value = get_str(project, key)
            if value:
                ids.add(value)
        pid = project.get("id")
        if isinstance(pid, (str, int)) and not isinstance(pid, bool) and str(pid).strip():
            ids.add(str(pid).strip())
    return frozenset(ids)


def parse_release(obj: object) -> Result[Release, str]:
    """Build a Release from a decoded JSON object.

    Returns:
        Ok(Release), or Err with a description of what is malformed
    """
    data = as_str_dict(obj)
    if data is None:
        return Err("release entry is not a JSON object")

    version = get_str(data, "version")
    if version is None:
        return Err("release entry has no version")

    raw_date = get_str(data, "dateCreated")
    date_created = parse_timestamp(raw_date) if raw_date else None
    if date_created is None:
        return Err(f"release {version} has an invalid dateCreated: {raw_date!r}")

    return Ok(
        Release(
            version=version,
            date_created=date_created,
            projects=_project_ids(get_list(data, "projects") or []),
        )
    )
