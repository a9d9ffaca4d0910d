"""Tests for the scraper (fetch + extraction).

HTTP is mocked with ``respx`` so no real network calls are made.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from searchengine.config import Settings, settings
from searchengine.errors import FetchError
from searchengine.scraper import (
    build_client,
    extract_links,
    extract_text,
    extract_title,
    fetch_page,
)

SAMPLE_HTML = """
<html>
  <head>
    <title> Cats &amp; Dogs </title>
    <style>body { color: red; }</style>
  </head>
  <body>
    <script>var hidden = "secret";</script>
    <h1>Pets</h1>
    <p>Cats sleep a lot.</p>
    <a href="/cats">Cats</a>
    <a href="dogs/">Dogs</a>
    <a href="https://other.com/page">Elsewhere</a>
    <a href="#top">Top</a>
    <a href="/cats">Cats again</a>
  </body>
</html>
"""


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

class TestExtraction:
    def test_title(self) -> None:
        assert extract_title(SAMPLE_HTML) == "Cats & Dogs"

    def test_missing_title(self) -> None:
        assert extract_title("<p>no title</p>") == ""

    def test_visible_text_only(self) -> None:
        text = extract_text(SAMPLE_HTML)
        assert "Cats sleep a lot." in text
        assert "Pets" in text
        assert "secret" not in text
        assert "color" not in text
        assert "Cats & Dogs" not in text
        assert "  " not in text

    def test_links_absolute_and_deduplicated(self) -> None:
        links = extract_links(SAMPLE_HTML, "https://example.com/pets/")
        assert links == [
            "https://example.com/cats",
            "https://example.com/pets/dogs/",
            "https://other.com/page",
        ]


# ---------------------------------------------------------------------------
# fetch_page
# ---------------------------------------------------------------------------

class TestFetchPage:
    @respx.mock
    def test_success_parses_html(self) -> None:
        respx.get("https://example.com/pets/").mock(
            return_value=httpx.Response(200, html=SAMPLE_HTML)
        )

        page = fetch_page("https://example.com/pets/")

        assert page.is_success
        assert page.status_code == 200
        assert page.title == "Cats & Dogs"
        assert "Cats sleep a lot." in page.text
        assert "https://example.com/cats" in page.links
        assert page.html == SAMPLE_HTML

    @respx.mock
    def test_redirect_not_followed(self) -> None:
        respx.get("https://example.com/old").mock(
            return_value=httpx.Response(301, headers={"Location": "https://example.com/new"})
        )
        target = respx.get("https://example.com/new").mock(
            return_value=httpx.Response(200, html="<p>new</p>")
        )

        page = fetch_page("https://example.com/old")

        assert page.is_redirect
        assert page.html == ""
        assert page.links == []
        assert not target.called

    @respx.mock
    def test_error_status_returned(self) -> None:
        respx.get("https://example.com/missing").mock(
            return_value=httpx.Response(404, html="<p>not found</p>")
        )

        page = fetch_page("https://example.com/missing")

        assert page.is_error
        assert page.status_code == 404
        assert page.text == ""

    @respx.mock
    def test_non_html_not_parsed(self) -> None:
        respx.get("https://example.com/data").mock(
            return_value=httpx.Response(200, json={"cat": 1})
        )

        page = fetch_page("https://example.com/data")

        assert page.is_success
        assert page.html == ""
        assert page.text == ""

    @respx.mock
    def test_timeout_raises_fetch_error(self) -> None:
        respx.get("https://example.com/slow").mock(side_effect=httpx.ConnectTimeout)

        with pytest.raises(FetchError) as exc_info:
            fetch_page("https://example.com/slow")

        assert exc_info.value.url == "https://example.com/slow"

    @respx.mock
    def test_crawler_identity_headers(self) -> None:
        route = respx.get("https://example.com/").mock(
            return_value=httpx.Response(200, html="<p>hi</p>")
        )

        fetch_page("https://example.com/")

        request = route.calls.last.request
        assert request.headers["User-Agent"] == settings.user_agent
        assert request.headers["Referer"] == settings.referrer

    @respx.mock
    def test_client_uses_given_settings(self, tmp_path) -> None:
        custom = Settings(
            workspace_dir=tmp_path,
            user_agent="CustomBot/1.0",
            referrer="https://custom.example",
            request_timeout=1.5,
        )
        route = respx.get("https://example.com/").mock(
            return_value=httpx.Response(200, html="<p>hi</p>")
        )

        with build_client(config=custom) as client:
            assert client.timeout.connect == 1.5
            fetch_page("https://example.com/", client)

        request = route.calls.last.request
        assert request.headers["User-Agent"] == "CustomBot/1.0"
        assert request.headers["Referer"] == "https://custom.example"
