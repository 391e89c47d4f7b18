"""Parsing of Sentry's ``Link`` pagination header.

Sentry paginates with a cursor carried in the ``Link`` response header::

    <https://sentry.example.com/api/0/.../releases/?&cursor=100:-1:1>;
        rel="previous"; results="false"; cursor="100:-1:1",
    <https://sentry.example.com/api/0/.../releases/?&cursor=100:1:0>;
        rel="next"; results="true"; cursor="100:1:0"

Every parameter value is a string; ``results="true"`` on the ``next``
relation is what tells us another page exists. That wire quirk stays in this
module: callers only ever see a typed :class:`PageCursor`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

__all__ = ["LinkRelation", "PageCursor", "parse_link_header", "next_page_cursor"]

_LINK_RE = re.compile(r"<([^>]*)>([^<]*)")
_PARAM_RE = re.compile(r'([\w.-]+)\s*=\s*(?:"([^"]*)"|([^\s;,]*))')


@dataclass(frozen=True, slots=True)
class LinkRelation:
    """One ``<url>; key="value"`` entry of a Link header."""

    url: str
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PageCursor:
    """Where the next page is, if there is one.

    Attributes:
        has_next: True if the server reports more results
        next_url: URL of the next page (only set when has_next)
    """

    has_next: bool
    next_url: str | None = None


LAST_PAGE = PageCursor(has_next=False)


def parse_link_header(value: str | None) -> dict[str, LinkRelation]:
    """Parse a Link header into relations keyed by ``rel``.

    An entry with ``rel="next prev"`` is registered under both names. Entries
    without a ``rel`` parameter are ignored.
    """
    relations: dict[str, LinkRelation] = {}
    if not value:
        return relations

    for match in _LINK_RE.finditer(value):
        url = match.group(1).strip()
        params: dict[str, str] = {}
        for key, quoted, bare in _PARAM_RE.findall(match.group(2)):
            params[key.lower()] = quoted or bare

        rel = params.get("rel")
        if not rel:
            continue
        for name in rel.split():
            relations[name.lower()] = LinkRelation(url=url, params=params)

    return relations


def next_page_cursor(value: str | None) -> PageCursor:
    """Return the cursor for the page after the one carrying this header.

    A missing header or a missing ``next`` relation means the current page is
    the last one.
    """
    nxt = parse_link_header(value).get("next")
    if nxt is None or not nxt.url:
        return LAST_PAGE
    if nxt.params.get("results", "").strip().lower() != "true":
        return LAST_PAGE
    return PageCursor(has_next=True, next_url=nxt.url)
