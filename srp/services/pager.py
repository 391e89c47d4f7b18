"""Release listing traversal.

Sentry lists releases one page at a time; the address of page N+1 is only
known once page N's ``Link`` header has been read, so pages are fetched
strictly in order. The whole listing is gathered before anything is
filtered: a failure on any page aborts the run and nothing fetched so far
is used.
"""

from __future__ import annotations

import json
from dataclasses import replace
from urllib.parse import urljoin, urlsplit, urlunsplit

from srp.core.config import Config
from srp.core.result import Err, Ok, Result
from srp.core.structured import as_obj_list
from srp.output.console import ConsoleProtocol, Style
from srp.sentry.http import HttpClient
from srp.sentry.links import next_page_cursor
from srp.sentry.models import Page, Release, parse_release
from srp.services.errors import PruneError

__all__ = ["auth_headers", "fetch_all_releases", "fetch_page", "next_page_url"]


def auth_headers(config: Config) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {config.token}",
        "Accept": "application/json",
    }


def next_page_url(next_url: str, *, current_url: str, config: Config) -> str:
    """Resolve a pagination link into the URL of the next request.

    Relative links are resolved against the page that carried them. Sentry
    builds absolute links from the host it believes it serves, which drops a
    non-default port; when a port is configured and the link has none, the
    configured scheme, host and port replace the link's so the next request
    reaches the same server. Only path, query and fragment come from the link.
    """
    url = urljoin(current_url, next_url)
    if config.port is None:
        return url

    parts = urlsplit(url)
    try:
        if parts.port is not None:
            return url
    except ValueError:
        return url

    server = urlsplit(config.server_url)
    return urlunsplit((server.scheme, server.netloc, parts.path, parts.query, parts.fragment))


def fetch_page(*, url: str, config: Config, http: HttpClient) -> Result[Page, PruneError]:
    """Fetch and decode one page of the release listing."""
    result = http.get(url, auth_headers(config))
    if isinstance(result, Err):
        return Err(
            PruneError(
                kind="fetch_failed",
                message=f"Request failed: {result.error}",
                hint="Check SENTRY_BASE_URL and SENTRY_PORT, and that the server is reachable.",
            )
        )
    response = result.value

    if response.status != 200:
        return Err(
            PruneError(
                kind="fetch_failed",
                message=f"Request Failed. Status Code: {response.status} ({url})",
                hint="Check SENTRY_TOKEN and SENTRY_ORGANIZATION."
                if response.status in (401, 403, 404)
                else None,
            )
        )

    content_type = response.header("content-type") or ""
    if not content_type.lower().startswith("application/json"):
        return Err(
            PruneError(
                kind="invalid_response",
                message=(
                    "Invalid content-type. "
                    f"Expected application/json but received {content_type or 'nothing'}"
                ),
            )
        )

    try:
        data: object = json.loads(response.body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(PruneError(kind="invalid_response", message=f"JSON parse error: {e}"))

    entries = as_obj_list(data)
    if entries is None:
        return Err(
            PruneError(kind="invalid_response", message=f"Expected a JSON array of releases ({url})")
        )

    releases: list[Release] = []
    for entry in entries:
        parsed = parse_release(entry)
        if isinstance(parsed, Err):
            return Err(PruneError(kind="invalid_response", message=parsed.error))
        releases.append(parsed.value)

    cursor = next_page_cursor(response.header("link"))
    if cursor.next_url is not None:
        cursor = replace(
            cursor, next_url=next_page_url(cursor.next_url, current_url=url, config=config)
        )
    return Ok(Page(releases=tuple(releases), cursor=cursor))


def fetch_all_releases(
    *, config: Config, http: HttpClient, console: ConsoleProtocol
) -> Result[tuple[Release, ...], PruneError]:
    """Fetch every release of the organization, following pagination.

    Returns:
        Ok with all releases in listing order, or Err on the first failure
    """
    releases: list[Release] = []
    url: str | None = config.releases_url

    while url is not None:
        console.print(f"fetching {url}", Style.DIM)
        page = fetch_page(url=url, config=config, http=http)
        if isinstance(page, Err):
            return page

        releases.extend(page.value.releases)
        url = page.value.cursor.next_url if page.value.cursor.has_next else None

    return Ok(tuple(releases))
