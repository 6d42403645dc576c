"""Unit tests for JSON-LD article extraction."""

from __future__ import annotations

import json

from bs4 import BeautifulSoup

from html2rss.extractors.structured import (
    extract_structured_items,
    is_article_node,
    node_to_item,
)

BASE = "https://example.com/news/"


def _page(*blocks: object, raw: str | None = None) -> BeautifulSoup:
    scripts = []
    if raw is not None:
        scripts.append(f'<script type="application/ld+json">{raw}</script>')
    for block in blocks:
        scripts.append(f'<script type="application/ld+json">{json.dumps(block)}</script>')
    return BeautifulSoup(f"<html><head>{''.join(scripts)}</head><body></body></html>", "lxml")


class TestIsArticleNode:
    def test_news_article(self):
        assert is_article_node({"@type": "NewsArticle"})

    def test_report(self):
        assert is_article_node({"@type": "Report"})

    def test_type_list(self):
        assert is_article_node({"@type": ["Thing", "BlogArticle"]})

    def test_plain_type_key(self):
        assert is_article_node({"type": "article"})

    def test_non_article(self):
        assert not is_article_node({"@type": "Person"})

    def test_non_dict(self):
        assert not is_article_node("Article")
        assert not is_article_node(None)


class TestNodeToItem:
    def test_headline_preferred_over_name(self):
        item = node_to_item({"@type": "Article", "headline": "Head", "name": "Name"}, BASE)
        assert item is not None
        assert item.title == "Head"

    def test_name_fallback(self):
        item = node_to_item({"@type": "Article", "name": "Name"}, BASE)
        assert item is not None
        assert item.title == "Name"

    def test_missing_title_dropped(self):
        assert node_to_item({"@type": "Article", "url": "/a"}, BASE) is None

    def test_link_falls_back_to_base(self):
        item = node_to_item({"@type": "Article", "headline": "T"}, BASE)
        assert item.link == BASE

    def test_full_mapping(self):
        node = {
            "@type": "Article",
            "headline": "CafÃ© opens",
            "url": "/2024/01/02/cafe",
            "description": "  A   new place ",
            "datePublished": "2024-01-02T10:00:00Z",
            "image": {"url": "/img/cafe.jpg"},
        }
        item = node_to_item(node, BASE)
        assert item.title == "Café opens"
        assert item.link == "https://example.com/2024/01/02/cafe"
        assert item.description == "A new place"
        assert item.pub_date == "2024-01-02T10:00:00Z"
        assert item.image == "https://example.com/img/cafe.jpg"

    def test_image_string(self):
        item = node_to_item({"@type": "Article", "headline": "T", "image": "pic.jpg"}, BASE)
        assert item.image == "https://example.com/news/pic.jpg"

    def test_image_array_first_element(self):
        node = {"@type": "Article", "headline": "T", "image": [{"url": "/a.jpg"}, "/b.jpg"]}
        assert node_to_item(node, BASE).image == "https://example.com/a.jpg"


class TestExtractStructuredItems:
    def test_graph_member(self):
        soup = _page({
            "@context": "https://schema.org",
            "@graph": [
                {"@type": "WebSite", "name": "Example"},
                {"@type": "NewsArticle", "headline": "Test", "url": "/a"},
            ],
        })
        items = extract_structured_items(soup, BASE)
        assert items is not None
        assert [(it.title, it.link) for it in items] == [("Test", "https://example.com/a")]

    def test_root_object(self):
        soup = _page({"@type": "Article", "headline": "Root", "url": "https://example.com/r"})
        items = extract_structured_items(soup, BASE)
        assert [it.title for it in items] == ["Root"]

    def test_root_array(self):
        soup = _page([
            {"@type": "Person", "name": "Someone"},
            {"@type": "Article", "headline": "One"},
            {"@type": "Article", "headline": "Two"},
        ])
        items = extract_structured_items(soup, BASE)
        assert [it.title for it in items] == ["One", "Two"]

    def test_main_entity_of_page(self):
        soup = _page({
            "@type": "WebPage",
            "mainEntityOfPage": {"@type": "Article", "headline": "Main"},
        })
        items = extract_structured_items(soup, BASE)
        assert [it.title for it in items] == ["Main"]

    def test_malformed_block_skipped(self):
        soup = _page({"@type": "Article", "headline": "Good"}, raw="{not json")
        items = extract_structured_items(soup, BASE)
        assert [it.title for it in items] == ["Good"]

    def test_deeply_nested_block_skipped(self):
        soup = _page({"@type": "NewsArticle", "headline": "Ok"}, raw="[" * 100_000)
        items = extract_structured_items(soup, BASE)
        assert [it.title for it in items] == ["Ok"]

    def test_first_qualifying_block_wins(self):
        soup = _page(
            {"@type": "Organization", "name": "Org"},
            {"@type": "Article", "headline": "First"},
            {"@type": "Article", "headline": "Second"},
        )
        items = extract_structured_items(soup, BASE)
        assert [it.title for it in items] == ["First"]

    def test_no_articles_returns_none(self):
        soup = _page({"@type": "Organization", "name": "Org"})
        assert extract_structured_items(soup, BASE) is None

    def test_no_scripts_returns_none(self):
        soup = BeautifulSoup("<html><body><p>x</p></body></html>", "lxml")
        assert extract_structured_items(soup, BASE) is None

    def test_fixture_graph(self, jsonld_graph_html):
        soup = BeautifulSoup(jsonld_graph_html, "lxml")
        items = extract_structured_items(soup, "https://example.com/")
        assert len(items) == 1
        assert items[0].link == "https://example.com/a"
