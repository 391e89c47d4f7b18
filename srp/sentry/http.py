"""HTTP client abstraction for the Sentry API.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing

A request that reaches the server always yields an ``HttpResponse``, whatever
its status; callers decide which statuses they accept. ``HttpError`` is
reserved for requests that never produced a response (DNS, refused
connection, timeout, malformed URL).
"""

from __future__ import annotations

import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from email.message import Message
from typing import Protocol, runtime_checkable

from srp.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """Transport-level failure.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """A response received from the server.

    Attributes:
        url: Requested URL
        status: HTTP status code
        headers: Response headers, keys lower-cased
        body: Raw response body
        reason: Status reason phrase, if the server sent one
    """

    url: str
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    reason: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for the HTTP calls the pruner makes.

    This abstraction allows injecting mock clients for testing,
    avoiding real network calls in unit tests.
    """

    def get(self, url: str, headers: Mapping[str, str]) -> Result[HttpResponse, HttpError]:
        """Issue a GET request.

        Args:
            url: URL to fetch
            headers: Request headers

        Returns:
            Ok with the response (any status), or Err with HttpError
        """
        ...

    def delete(self, url: str, headers: Mapping[str, str]) -> Result[HttpResponse, HttpError]:
        """Issue a DELETE request.

        Args:
            url: URL of the resource to delete
            headers: Request headers

        Returns:
            Ok with the response (any status), or Err with HttpError
        """
        ...


def _flatten_headers(message: Message) -> dict[str, str]:
    # Repeated headers (several Link lines) are folded into one value.
    headers: dict[str, str] = {}
    for key, value in message.items():
        k = key.lower()
        headers[k] = f"{headers[k]}, {value}" if k in headers else value
    return headers


class RealHttpClient:
    """HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - Error statuses returned as responses, not exceptions
    - Timeout handling
    """

    def __init__(self, timeout: float = 30.0, user_agent: str = "srp/0.1.0") -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _request(
        self, method: str, url: str, headers: Mapping[str, str]
    ) -> Result[HttpResponse, HttpError]:
        try:
            req = urllib.request.Request(
                url,
                method=method,
                headers={"User-Agent": self.user_agent, **headers},
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(
                    HttpResponse(
                        url=url,
                        status=response.status,
                        headers=_flatten_headers(response.headers),
                        body=response.read(),
                        reason=response.reason or "",
                    )
                )
        except urllib.error.HTTPError as e:
            try:
                body = e.read()
            except OSError:
                body = b""
            return Ok(
                HttpResponse(
                    url=url,
                    status=e.code,
                    headers=_flatten_headers(e.headers) if e.headers is not None else {},
                    body=body,
                    reason=str(e.reason or ""),
                )
            )
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def get(self, url: str, headers: Mapping[str, str]) -> Result[HttpResponse, HttpError]:
        return self._request("GET", url, headers)

    def delete(self, url: str, headers: Mapping[str, str]) -> Result[HttpResponse, HttpError]:
        return self._request("DELETE", url, headers)


class MockHttpClient:
    """Mock HTTP client for testing.

    Allows setting predefined responses per method and URL. Unknown URLs
    answer 404.

    Usage:
        client = MockHttpClient()
        client.set_response("GET", url, HttpResponse(url=url, status=200, ...))
        result = client.get(url, {})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], HttpResponse | HttpError] = {}
        self.calls: list[tuple[str, str]] = []
        self.sent_headers: list[dict[str, str]] = []

    def set_response(self, method: str, url: str, response: HttpResponse | HttpError) -> None:
        """Set the response for a method and URL."""
        self._responses[(method.upper(), url)] = response

    def _answer(
        self, method: str, url: str, headers: Mapping[str, str]
    ) -> Result[HttpResponse, HttpError]:
        self.calls.append((method, url))
        self.sent_headers.append(dict(headers))

        response = self._responses.get((method, url))
        if response is None:
            return Ok(HttpResponse(url=url, status=404, reason="Not Found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get(self, url: str, headers: Mapping[str, str]) -> Result[HttpResponse, HttpError]:
        return self._answer("GET", url, headers)

    def delete(self, url: str, headers: Mapping[str, str]) -> Result[HttpResponse, HttpError]:
        return self._answer("DELETE", url, headers)

    def calls_for(self, method: str) -> list[str]:
        """URLs requested with the given method, in order."""
        return [url for m, url in self.calls if m == method.upper()]
