"""Existing-feed discovery and RSS 2.0 / Atom 1.0 validation.

``find_linked_feed`` scans ``<link rel="alternate">`` declarations in a page;
``parse_feed`` / ``validate_feed`` check that fetched feed XML actually holds
entries.  No network requests are made here.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET  # for ET.ParseError only
from typing import NamedTuple
from urllib.parse import urljoin

import defusedxml.ElementTree as defused_ET
from bs4 import BeautifulSoup, Tag
from defusedxml import DefusedXmlException

from html2rss.extractors.urlnorm import resolve_url

logger = logging.getLogger(__name__)

_ATOM_NS = "http://www.w3.org/2005/Atom"

# Substrings of a <link type="..."> that mark a syndication feed
_FEED_TYPE_TOKENS: tuple[str, ...] = ("rss", "atom")


class FeedValidation(NamedTuple):
    """Outcome of :func:`validate_feed`."""

    is_valid: bool
    item_count: int
    error: str | None


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def find_linked_feed(soup: BeautifulSoup, base: str) -> str | None:
    """Return the first RSS/Atom URL declared via ``<link rel="alternate">``."""
    for link in soup.find_all("link"):
        if not isinstance(link, Tag):
            continue
        rel_val = link.get("rel") or []
        if isinstance(rel_val, str):
            rel_val = rel_val.split()
        if "alternate" not in [r.lower() for r in rel_val]:
            continue
        feed_type = str(link.get("type") or "").lower()
        if not any(token in feed_type for token in _FEED_TYPE_TOKENS):
            continue
        href = link.get("href")
        if isinstance(href, str) and href.strip():
            feed_url = resolve_url(base, href)
            if feed_url:
                return feed_url
    return None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _text(el: ET.Element | None) -> str | None:
    """Return stripped element text or None."""
    if el is None:
        return None
    t = (el.text or "").strip()
    return t or None


def _parse_rss(root: ET.Element) -> list[str]:
    """Return the entry links of an RSS 2.0 <channel>/<item> structure."""
    channel = root.find("channel")
    items = (channel if channel is not None else root).findall("item")
    links: list[str] = []

    for item in items:
        url = _text(item.find("link"))
        if not url:
            guid_el = item.find("guid")
            if guid_el is not None and guid_el.get("isPermaLink", "true").lower() != "false":
                url = _text(guid_el)
        if url:
            links.append(url)
    return links


def _parse_atom(root: ET.Element, base_url: str) -> list[str]:
    """Return the entry links of an Atom 1.0 <feed>/<entry> structure, namespaced or not."""
    pfx = f"{{{_ATOM_NS}}}" if root.tag.startswith("{") else ""

    links: list[str] = []
    for entry in root.findall(f"{pfx}entry"):
        for link_el in entry.findall(f"{pfx}link"):
            if link_el.get("rel", "alternate") in ("alternate", ""):
                href = link_el.get("href", "").strip()
                if href:
                    links.append(urljoin(base_url, href) if base_url else href)
                    break
    return links


def _parse_root(xml_text: str | bytes) -> ET.Element:
    """Parse *xml_text* safely; raises ``ET.ParseError`` or ``DefusedXmlException``."""
    if isinstance(xml_text, str):
        # ElementTree rejects str input carrying an encoding declaration
        xml_text = xml_text.strip().encode("utf-8")
    return defused_ET.fromstring(xml_text)


def _entries(root: ET.Element, base_url: str) -> list[str]:
    tag = root.tag.lower()
    if "rss" in tag or root.find("channel") is not None:
        entries = _parse_rss(root)
        if entries:
            return entries
    if tag.endswith("feed"):
        return _parse_atom(root, base_url)
    return _parse_rss(root) or _parse_atom(root, base_url)


def parse_feed(xml_text: str | bytes, base_url: str = "") -> list[str]:
    """Parse RSS 2.0 or Atom 1.0 XML and return its entry links in document order.

    Returns an empty list on parse failure rather than raising.
    """
    try:
        root = _parse_root(xml_text)
    except (ET.ParseError, DefusedXmlException) as exc:
        logger.warning("Feed XML parse error: %s", exc)
        return []
    return _entries(root, base_url)


def validate_feed(xml_text: str | bytes, base_url: str = "") -> FeedValidation:
    """Check that *xml_text* is a well-formed RSS/Atom feed with at least one entry."""
    if not xml_text or not xml_text.strip():
        return FeedValidation(False, 0, "Empty content")
    try:
        root = _parse_root(xml_text)
    except (ET.ParseError, DefusedXmlException) as exc:
        return FeedValidation(False, 0, f"Malformed XML: {exc}")

    tag = root.tag.lower()
    if "rss" not in tag and not tag.endswith("feed") and root.find("channel") is None:
        return FeedValidation(False, 0, f"Not RSS/Atom (root element {root.tag!r})")

    entries = _entries(root, base_url)
    if not entries:
        return FeedValidation(False, 0, "No <item> or <entry> elements found")
    return FeedValidation(True, len(entries), None)
