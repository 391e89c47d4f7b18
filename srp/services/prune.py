"""Release pruning: select stale releases and delete them.

The run is all-or-nothing up to the delete phase: configuration and listing
errors abort it. Once deleting starts, each release is attempted exactly
once and a rejected delete is recorded, never raised, so one locked release
does not stop the rest.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import quote

from srp.core.config import Config, validate_config
from srp.core.result import Err, Ok, Result
from srp.core.structured import as_str_dict, get_str
from srp.output.console import ConsoleProtocol, Style
from srp.sentry.http import HttpClient, HttpResponse
from srp.sentry.models import Release
from srp.services.errors import PruneError
from srp.services.pager import auth_headers, fetch_all_releases
from srp.services.predicates import is_associated_with_project, is_older_than_days

__all__ = [
    "DeleteOutcome",
    "PruneReport",
    "delete_release",
    "prune_releases",
    "release_url",
    "select_releases",
]

_RULE = "-----------------------------------------"


@dataclass(frozen=True, slots=True)
class DeleteOutcome:
    """Result of one delete attempt.

    Attributes:
        version: Release version
        ok: True if the server accepted the delete
        detail: Server-supplied reason when it did not
    """

    version: str
    ok: bool
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class PruneReport:
    found: int
    selected: tuple[str, ...]
    dry_run: bool
    outcomes: tuple[DeleteOutcome, ...] = ()

    @property
    def deleted_count(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)

    @property
    def failures(self) -> tuple[DeleteOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)


def select_releases(
    releases: Sequence[Release],
    *,
    days_to_keep: float,
    project: str | None,
    now: datetime | None = None,
) -> tuple[str, ...]:
    """Versions of the releases to delete, in listing order."""
    selected: list[str] = []
    for release in releases:
        if project is not None and not is_associated_with_project(project, release):
            continue
        if is_older_than_days(days_to_keep, release, now=now):
            selected.append(release.version)
    return tuple(selected)


def release_url(config: Config, version: str) -> str:
    # Versions may contain "/" or "@" (e.g. "app@1.2.3"); keep them one path segment.
    return f"{config.releases_url}{quote(version, safe='')}/"


def _failure_detail(response: HttpResponse) -> str:
    try:
        data = as_str_dict(json.loads(response.body.decode("utf-8")))
    except (json.JSONDecodeError, UnicodeDecodeError):
        data = None
    if data is not None:
        detail = get_str(data, "detail")
        if detail:
            return detail
    reason = f" {response.reason}" if response.reason else ""
    return f"HTTP {response.status}{reason}"


def delete_release(*, config: Config, http: HttpClient, version: str) -> DeleteOutcome:
    """Issue one DELETE for a release version and capture what happened."""
    result = http.delete(release_url(config, version), auth_headers(config))
    if isinstance(result, Err):
        return DeleteOutcome(version=version, ok=False, detail=result.error.message)

    response = result.value
    if response.ok:
        return DeleteOutcome(version=version, ok=True)
    return DeleteOutcome(version=version, ok=False, detail=_failure_detail(response))


def prune_releases(
    *,
    config: Config,
    http: HttpClient,
    console: ConsoleProtocol,
    dry_run: bool,
    now: datetime | None = None,
) -> Result[PruneReport, PruneError]:
    """Delete every release older than the configured threshold.

    Args:
        config: Run settings; validated before any request is made
        http: HTTP client used for listing and deleting
        console: Progress and summary output
        dry_run: Report the selection without deleting anything
        now: Reference time for the age check (defaults to current UTC time)

    Returns:
        Ok(PruneReport) once the run completes, including when some deletes
        were rejected; Err(PruneError) if configuration or listing failed
    """
    valid = validate_config(config)
    if isinstance(valid, Err):
        return Err(PruneError(kind="config_invalid", message=valid.error.message))

    fetched = fetch_all_releases(config=config, http=http, console=console)
    if isinstance(fetched, Err):
        return fetched
    releases = fetched.value
    console.print(f"found {len(releases)} releases")

    selected = select_releases(
        releases, days_to_keep=config.days_to_keep, project=config.project, now=now
    )

    if not selected:
        scope = f' for project "{config.project}"' if config.project else ""
        console.info(f"No releases older than {config.days_to_keep:g} days{scope} found.")
        return Ok(PruneReport(found=len(releases), selected=(), dry_run=dry_run))

    console.print(f"Found {len(selected)} release versions to delete.")

    if dry_run:
        for version in selected:
            console.print(f"  {version}", Style.DIM)
        console.print(_RULE)
        console.warning("Nothing deleted since this was a dry run.")
        return Ok(PruneReport(found=len(releases), selected=selected, dry_run=True))

    outcomes: list[DeleteOutcome] = []
    for version in selected:
        console.print(f"Deleting {version} ...")
        outcome = delete_release(config=config, http=http, version=version)
        if outcome.ok:
            console.success("Done.")
        else:
            console.error(f"{version}: {outcome.detail}")
        outcomes.append(outcome)

    report = PruneReport(
        found=len(releases), selected=selected, dry_run=False, outcomes=tuple(outcomes)
    )

    console.print(_RULE)
    console.print(
        f"Deleted {report.deleted_count} releases. "
        f"{report.failed_count} releases were not deleted because the Sentry server "
        "rejected the request."
    )
    if report.failures:
        console.print("Reasons:")
        for failure in report.failures:
            console.print(f"* {failure.version}: {failure.detail}")

    return Ok(report)
