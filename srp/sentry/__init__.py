"""Sentry REST API boundary: HTTP client, pagination headers, wire models."""

from .http import HttpClient, HttpError, HttpResponse, MockHttpClient, RealHttpClient
from .links import PageCursor, next_page_cursor, parse_link_header
from .models import Page, Release, parse_release

__all__ = [
    # http
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
    # links
    "PageCursor",
    "next_page_cursor",
    "parse_link_header",
    # models
    "Page",
    "Release",
    "parse_release",
]
