"""JSON-LD (schema.org) article extraction.

Search order inside each ``<script type="application/ld+json">`` block:
    @graph members → root object → root array → mainEntityOfPage

The first block that yields at least one article wins.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from bs4 import BeautifulSoup

from html2rss.extractors.text import normalize_text
from html2rss.extractors.urlnorm import resolve_url
from html2rss.items import FeedItem

logger = logging.getLogger(__name__)

# Substrings of @type that mark a node as an article
_ARTICLE_TYPE_TOKENS: tuple[str, ...] = ("article", "newsarticle", "report")


def _type_names(node: dict) -> list[str]:
    dtype = node.get("@type", node.get("type"))
    if isinstance(dtype, str):
        return [dtype]
    if isinstance(dtype, list):
        return [t for t in dtype if isinstance(t, str)]
    return []


def is_article_node(node: Any) -> bool:
    """Return True if *node* is a JSON object whose type names an article."""
    if not isinstance(node, dict):
        return False
    return any(
        token in name.lower()
        for name in _type_names(node)
        for token in _ARTICLE_TYPE_TOKENS
    )


def _str_field(node: dict, key: str) -> str | None:
    value = node.get(key)
    return value if isinstance(value, str) else None


def _image_url(value: Any, base: str) -> str | None:
    """Resolve a schema.org ``image`` that may be a string, object or array."""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("url")
    if isinstance(value, str):
        return resolve_url(base, value)
    return None


def node_to_item(node: dict, base: str) -> FeedItem | None:
    """Map one article node to a :class:`FeedItem`; ``None`` without a title."""
    title = normalize_text(_str_field(node, "headline") or _str_field(node, "name"))
    if not title:
        return None

    link = resolve_url(base, _str_field(node, "url")) or base
    description = normalize_text(_str_field(node, "description")) or None
    pub_date = _str_field(node, "datePublished")
    image = _image_url(node.get("image"), base)

    return FeedItem(
        title=title,
        link=link,
        description=description,
        pub_date=pub_date,
        image=image,
    )


def _items_from(nodes: list[Any], base: str) -> list[FeedItem]:
    items: list[FeedItem] = []
    for node in nodes:
        if is_article_node(node):
            item = node_to_item(node, base)
            if item is not None:
                items.append(item)
    return items


def items_from_jsonld(data: Any, base: str) -> list[FeedItem]:
    """Return article items from one parsed JSON-LD document."""
    items: list[FeedItem] = []

    if isinstance(data, dict):
        graph = data.get("@graph")
        if isinstance(graph, list):
            items = _items_from(graph, base)
        if not items and is_article_node(data):
            items = _items_from([data], base)

    if not items and isinstance(data, list):
        items = _items_from(data, base)

    if not items and isinstance(data, dict):
        main_entity = data.get("mainEntityOfPage")
        if is_article_node(main_entity):
            items = _items_from([main_entity], base)

    return items


def extract_structured_items(soup: BeautifulSoup, base: str) -> list[FeedItem] | None:
    """Return the items of the first JSON-LD block that describes articles.

    Malformed blocks are skipped.  Returns ``None`` when no block qualifies.
    """
    for script in soup.find_all("script", type="application/ld+json"):
        raw = script.string or script.get_text()
        try:
            data = json.loads(raw)
        except (ValueError, TypeError, RecursionError) as exc:
            logger.debug("Skipping malformed JSON-LD block on %s: %s", base, exc)
            continue

        items = items_from_jsonld(data, base)
        if items:
            logger.debug("JSON-LD yielded %d item(s) on %s", len(items), base)
            return items
    return None
