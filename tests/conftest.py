"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from html2rss.fetcher import FetchError

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


class FakeFetcher:
    """Scripted :class:`~html2rss.fetcher.Fetcher` that never touches the network.

    ``pages`` maps a URL to page text, to an exception to raise, or to a list
    of those consumed one per call.  Unknown URLs raise a 404 ``FetchError``.
    """

    def __init__(self, pages: dict[str, object] | None = None) -> None:
        self.pages: dict[str, object] = dict(pages or {})
        self.calls: list[str] = []

    def fetch(self, url: str, timeout_ms: int) -> str:
        self.calls.append(url)
        response = self.pages.get(url)
        if isinstance(response, list):
            response = response.pop(0) if response else None
        if response is None:
            raise FetchError(f"HTTP 404 fetching {url}", url=url, status=404)
        if isinstance(response, Exception):
            raise response
        return str(response)


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def feed_link_html() -> str:
    return _read_fixture("feed_link.html")


@pytest.fixture
def jsonld_graph_html() -> str:
    return _read_fixture("jsonld_graph.html")


@pytest.fixture
def empty_html() -> str:
    return _read_fixture("empty.html")


@pytest.fixture
def mojibake_html() -> str:
    return _read_fixture("mojibake.html")


@pytest.fixture
def articles_html() -> str:
    return _read_fixture("articles.html")


@pytest.fixture
def article_page_html() -> str:
    return _read_fixture("article_page.html")


@pytest.fixture
def rss_xml() -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0"><channel><title>Example News</title>'
        "<link>https://example.com/</link><description>News</description>"
        "<item><title>One</title><link>https://example.com/2024/01/01/one</link>"
        "<pubDate>Mon, 01 Jan 2024 09:00:00 +0000</pubDate></item>"
        "<item><title>Two</title><guid>https://example.com/2024/01/02/two</guid></item>"
        "</channel></rss>"
    )
