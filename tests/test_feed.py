"""Unit tests for linked-feed discovery and feed validation."""

from __future__ import annotations

from bs4 import BeautifulSoup

from html2rss.extractors.feed import find_linked_feed, parse_feed, validate_feed

BASE = "https://example.com/news/"

_ATOM = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example</title>
  <entry>
    <title>Atom entry</title>
    <link rel="alternate" href="/2024/02/03/atom-entry"/>
    <updated>2024-02-03T10:00:00Z</updated>
  </entry>
</feed>"""


def _soup(head: str) -> BeautifulSoup:
    return BeautifulSoup(f"<html><head>{head}</head><body></body></html>", "lxml")


class TestFindLinkedFeed:
    def test_rss_link_resolved(self):
        soup = _soup('<link rel="alternate" type="application/rss+xml" href="/feed">')
        assert find_linked_feed(soup, BASE) == "https://example.com/feed"

    def test_atom_link(self):
        soup = _soup('<link rel="alternate" type="application/atom+xml" href="atom.xml">')
        assert find_linked_feed(soup, BASE) == "https://example.com/news/atom.xml"

    def test_non_feed_alternate_ignored(self):
        soup = _soup('<link rel="alternate" hreflang="fr" type="text/html" href="/fr/">')
        assert find_linked_feed(soup, BASE) is None

    def test_other_rel_ignored(self):
        soup = _soup('<link rel="stylesheet" type="application/rss+xml" href="/x">')
        assert find_linked_feed(soup, BASE) is None

    def test_first_match_wins(self):
        soup = _soup(
            '<link rel="alternate" type="application/rss+xml" href="/first">'
            '<link rel="alternate" type="application/atom+xml" href="/second">',
        )
        assert find_linked_feed(soup, BASE) == "https://example.com/first"

    def test_missing_href_skipped(self):
        soup = _soup(
            '<link rel="alternate" type="application/rss+xml">'
            '<link rel="alternate" type="application/rss+xml" href="/feed">',
        )
        assert find_linked_feed(soup, BASE) == "https://example.com/feed"

    def test_fixture(self, feed_link_html):
        soup = BeautifulSoup(feed_link_html, "lxml")
        assert find_linked_feed(soup, "https://example.com/") == "https://example.com/feed"

    def test_no_links(self):
        assert find_linked_feed(_soup(""), BASE) is None


class TestParseFeed:
    def test_rss_entries(self, rss_xml):
        assert parse_feed(rss_xml) == [
            "https://example.com/2024/01/01/one",
            "https://example.com/2024/01/02/two",
        ]

    def test_atom_entries_resolved(self):
        assert parse_feed(_ATOM, "https://example.com/") == [
            "https://example.com/2024/02/03/atom-entry",
        ]

    def test_malformed_returns_empty(self):
        assert parse_feed("<rss><channel>") == []


class TestValidateFeed:
    def test_valid_rss(self, rss_xml):
        result = validate_feed(rss_xml)
        assert result.is_valid
        assert result.item_count == 2
        assert result.error is None

    def test_valid_atom(self):
        assert validate_feed(_ATOM).is_valid

    def test_empty(self):
        result = validate_feed("   ")
        assert not result.is_valid
        assert result.item_count == 0

    def test_malformed(self):
        result = validate_feed("<rss><channel><item>")
        assert not result.is_valid
        assert "Malformed" in result.error

    def test_html_is_not_a_feed(self):
        result = validate_feed("<html><body><p>hi</p></body></html>")
        assert not result.is_valid
        assert "Not RSS/Atom" in result.error

    def test_feed_without_items(self):
        result = validate_feed('<rss version="2.0"><channel><title>x</title></channel></rss>')
        assert not result.is_valid
        assert result.item_count == 0
