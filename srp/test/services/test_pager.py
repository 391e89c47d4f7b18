"""Tests for srp.services.pager - listing traversal."""

from __future__ import annotations

from srp.core.result import Err, Ok
from srp.output.console import MockConsole
from srp.sentry.http import HttpError, HttpResponse, MockHttpClient
from srp.services.pager import fetch_all_releases, fetch_page, next_page_url
from srp.test._factories import (
    RELEASES_URL,
    make_config,
    page_response,
    release_obj,
)


def _page_urls(n: int, base: str = RELEASES_URL) -> list[str]:
    return [base] + [f"{base}?&cursor=100:{i}:0" for i in range(1, n)]


class TestFetchAllReleases:
    def test_single_page(self) -> None:
        http = MockHttpClient()
        http.set_response(
            "GET", RELEASES_URL, page_response(RELEASES_URL, [release_obj("a", age_days=1)])
        )

        result = fetch_all_releases(config=make_config(), http=http, console=MockConsole())

        assert isinstance(result, Ok)
        assert [r.version for r in result.value] == ["a"]
        assert http.calls == [("GET", RELEASES_URL)]

    def test_follows_pages_in_order(self) -> None:
        urls = _page_urls(3)
        http = MockHttpClient()
        for i, url in enumerate(urls):
            last = i == len(urls) - 1
            http.set_response(
                "GET",
                url,
                page_response(
                    url,
                    [release_obj(f"{i}-a", age_days=1), release_obj(f"{i}-b", age_days=2)],
                    next_url=None if last else urls[i + 1],
                    has_next=not last,
                ),
            )
        console = MockConsole()

        result = fetch_all_releases(config=make_config(), http=http, console=console)

        assert isinstance(result, Ok)
        assert [r.version for r in result.value] == ["0-a", "0-b", "1-a", "1-b", "2-a", "2-b"]
        assert http.calls_for("GET") == urls
        assert console.messages == [f"fetching {url}" for url in urls]

    def test_sends_bearer_token(self) -> None:
        http = MockHttpClient()
        http.set_response("GET", RELEASES_URL, page_response(RELEASES_URL, []))

        fetch_all_releases(config=make_config(token="tok"), http=http, console=MockConsole())

        assert http.sent_headers[0]["Authorization"] == "Bearer tok"

    def test_error_on_later_page_discards_everything(self) -> None:
        urls = _page_urls(2)
        http = MockHttpClient()
        http.set_response(
            "GET",
            urls[0],
            page_response(urls[0], [release_obj("a", age_days=90)], next_url=urls[1], has_next=True),
        )
        http.set_response("GET", urls[1], HttpResponse(url=urls[1], status=500))

        result = fetch_all_releases(config=make_config(), http=http, console=MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "fetch_failed"
        assert "500" in result.error.message

    def test_repairs_missing_port_on_next_page(self) -> None:
        config = make_config(port=9000)
        first = config.releases_url
        assert first == "https://sentry.example.com:9000/api/0/organizations/acme/releases/"
        advertised = "https://sentry.example.com/api/0/organizations/acme/releases/?&cursor=100:1:0"
        repaired = "https://sentry.example.com:9000/api/0/organizations/acme/releases/?&cursor=100:1:0"

        http = MockHttpClient()
        http.set_response(
            "GET",
            first,
            page_response(first, [release_obj("a", age_days=1)], next_url=advertised, has_next=True),
        )
        http.set_response("GET", repaired, page_response(repaired, [release_obj("b", age_days=1)]))

        result = fetch_all_releases(config=config, http=http, console=MockConsole())

        assert isinstance(result, Ok)
        assert [r.version for r in result.value] == ["a", "b"]
        assert http.calls_for("GET") == [first, repaired]

    def test_next_page_uses_configured_host(self) -> None:
        config = make_config(port=9000)
        first = config.releases_url
        advertised = "https://sentry-web-1.internal/api/0/organizations/acme/releases/?&cursor=1"
        expected = f"{first}?&cursor=1"

        http = MockHttpClient()
        http.set_response(
            "GET",
            first,
            page_response(first, [release_obj("a", age_days=1)], next_url=advertised, has_next=True),
        )
        http.set_response("GET", expected, page_response(expected, [release_obj("b", age_days=1)]))

        result = fetch_all_releases(config=config, http=http, console=MockConsole())

        assert isinstance(result, Ok)
        assert http.calls_for("GET") == [first, expected]

    def test_relative_next_link(self) -> None:
        relative = "/api/0/organizations/acme/releases/?&cursor=2"
        expected = f"{RELEASES_URL}?&cursor=2"

        http = MockHttpClient()
        http.set_response(
            "GET",
            RELEASES_URL,
            page_response(RELEASES_URL, [], next_url=relative, has_next=True),
        )
        http.set_response("GET", expected, page_response(expected, [release_obj("b", age_days=1)]))

        result = fetch_all_releases(config=make_config(), http=http, console=MockConsole())

        assert isinstance(result, Ok)
        assert [r.version for r in result.value] == ["b"]
        assert http.calls_for("GET") == [RELEASES_URL, expected]


class TestFetchPage:
    def test_rejects_non_json_content_type(self) -> None:
        http = MockHttpClient()
        http.set_response(
            "GET", RELEASES_URL, page_response(RELEASES_URL, [], content_type="text/html")
        )

        result = fetch_page(url=RELEASES_URL, config=make_config(), http=http)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_response"
        assert "text/html" in result.error.message

    def test_accepts_json_with_charset(self) -> None:
        http = MockHttpClient()
        http.set_response(
            "GET",
            RELEASES_URL,
            page_response(RELEASES_URL, [], content_type="application/json; charset=utf-8"),
        )

        assert isinstance(fetch_page(url=RELEASES_URL, config=make_config(), http=http), Ok)

    def test_rejects_non_200(self) -> None:
        http = MockHttpClient()
        http.set_response("GET", RELEASES_URL, page_response(RELEASES_URL, [], status=401))

        result = fetch_page(url=RELEASES_URL, config=make_config(), http=http)

        assert isinstance(result, Err)
        assert result.error.kind == "fetch_failed"
        assert result.error.hint is not None

    def test_transport_error(self) -> None:
        http = MockHttpClient()
        http.set_response(
            "GET", RELEASES_URL, HttpError(url=RELEASES_URL, status=0, message="Connection refused")
        )

        result = fetch_page(url=RELEASES_URL, config=make_config(), http=http)

        assert isinstance(result, Err)
        assert "Connection refused" in result.error.message

    def test_rejects_non_array_body(self) -> None:
        http = MockHttpClient()
        http.set_response(
            "GET",
            RELEASES_URL,
            HttpResponse(
                url=RELEASES_URL,
                status=200,
                headers={"content-type": "application/json"},
                body=b'{"detail": "nope"}',
            ),
        )

        result = fetch_page(url=RELEASES_URL, config=make_config(), http=http)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_response"

    def test_rejects_malformed_release(self) -> None:
        http = MockHttpClient()
        http.set_response("GET", RELEASES_URL, page_response(RELEASES_URL, [{"version": "x"}]))

        result = fetch_page(url=RELEASES_URL, config=make_config(), http=http)

        assert isinstance(result, Err)
        assert "dateCreated" in result.error.message

    def test_missing_link_header_is_last_page(self) -> None:
        http = MockHttpClient()
        http.set_response(
            "GET",
            RELEASES_URL,
            HttpResponse(
                url=RELEASES_URL,
                status=200,
                headers={"content-type": "application/json"},
                body=b"[]",
            ),
        )

        result = fetch_page(url=RELEASES_URL, config=make_config(), http=http)

        assert isinstance(result, Ok)
        assert result.value.cursor.has_next is False


class TestNextPageUrl:
    CURRENT = "https://sentry.example.com:9000/api/0/organizations/acme/releases/"

    def test_no_port_configured(self) -> None:
        url = "https://sentry.example.com/x?c=1"

        assert next_page_url(url, current_url=RELEASES_URL, config=make_config()) == url

    def test_inserts_configured_port(self) -> None:
        assert next_page_url(
            "https://sentry.example.com/x?c=1",
            current_url=self.CURRENT,
            config=make_config(port=9000),
        ) == "https://sentry.example.com:9000/x?c=1"

    def test_advertised_host_is_replaced_by_configured_host(self) -> None:
        assert next_page_url(
            "https://sentry-web-1.internal/api/0/organizations/acme/releases/?&cursor=1",
            current_url=self.CURRENT,
            config=make_config(port=9000),
        ) == "https://sentry.example.com:9000/api/0/organizations/acme/releases/?&cursor=1"

    def test_keeps_explicit_port(self) -> None:
        url = "https://sentry.example.com:8443/x"

        assert next_page_url(url, current_url=self.CURRENT, config=make_config(port=9000)) == url

    def test_ip_address_base_url(self) -> None:
        assert next_page_url(
            "http://10.0.0.5/x",
            current_url="http://10.0.0.5:9000/",
            config=make_config(base_url="http://10.0.0.5", port=9000),
        ) == "http://10.0.0.5:9000/x"

    def test_relative_link_resolved_against_current_page(self) -> None:
        assert next_page_url(
            "?&cursor=100:1:0", current_url=self.CURRENT, config=make_config(port=9000)
        ) == f"{self.CURRENT}?&cursor=100:1:0"

    def test_host_less_link_without_port(self) -> None:
        assert next_page_url(
            "/api/0/organizations/acme/releases/?&cursor=2",
            current_url=RELEASES_URL,
            config=make_config(),
        ) == f"{RELEASES_URL}?&cursor=2"
