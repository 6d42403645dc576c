"""html2rss.rss — RSS 2.0 serialization of extracted items.

Usage::

    from html2rss.rss import serialize_feed, write_document

    data = serialize_feed("https://example.com/news", items)   # bytes
    write_document(data, sys.stdout.buffer)
"""

from __future__ import annotations

import html
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from typing import BinaryIO

from lxml import etree

from html2rss import settings
from html2rss.extractors.urlnorm import extract_host
from html2rss.items import FeedItem

logger = logging.getLogger(__name__)


def _is_xml_char(char: str) -> bool:
    code = ord(char)
    if code in (0x09, 0x0A, 0x0D):
        return True
    if code < 0x20:
        return False
    # Surrogates and the two non-characters XML 1.0 forbids
    return not (0xD800 <= code <= 0xDFFF or code in (0xFFFE, 0xFFFF))


def sanitize_text(value: str) -> str:
    """Decode HTML entities once and drop characters XML cannot carry.

    Results longer than ``MAX_TEXT_LEN`` are cut and marked as truncated.
    """
    text = "".join(c for c in html.unescape(value) if _is_xml_char(c))
    if len(text) > settings.MAX_TEXT_LEN:
        text = text[: settings.MAX_TEXT_LEN] + settings.TRUNCATION_MARKER
    return text


def format_pub_date(raw: str) -> str:
    """Re-emit an RFC 3339 or RFC 2822 timestamp as RFC 2822; else return *raw*."""
    value = raw.strip()
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        dt = None
    if dt is not None and dt.tzinfo is not None and ("T" in value or " " in value):
        return format_datetime(dt)

    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return raw
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return format_datetime(dt)


def _text_element(parent: etree._Element, tag: str, text: str) -> etree._Element:
    el = etree.SubElement(parent, tag)
    el.text = sanitize_text(text)
    return el


def build_feed(base: str, items: Iterable[FeedItem]) -> etree._Element:
    """Return the ``<rss>`` element tree for *items*.

    Raises:
        ValueError: *base* has no host.
    """
    host = extract_host(base)
    if not host:
        raise ValueError(f"base URL has no host: {base!r}")

    rss = etree.Element("rss", version="2.0")
    channel = etree.SubElement(rss, "channel")
    _text_element(channel, "title", f"Feed for {host}")
    _text_element(channel, "link", base)
    _text_element(channel, "description", settings.FEED_DESCRIPTION)

    count = 0
    for item in items:
        node = etree.SubElement(channel, "item")
        _text_element(node, "title", item.title)
        _text_element(node, "link", item.link)
        if item.description:
            _text_element(node, "description", item.description)
        if item.pub_date:
            _text_element(node, "pubDate", format_pub_date(item.pub_date))
        if item.image:
            etree.SubElement(node, "enclosure", url=sanitize_text(item.image))
        count += 1

    logger.debug("Built feed for %s with %d item(s)", host, count)
    return rss


def serialize_feed(base: str, items: Iterable[FeedItem]) -> bytes:
    """Serialize *items* as a UTF-8 RSS 2.0 document with an XML declaration."""
    return etree.tostring(
        build_feed(base, items),
        xml_declaration=True,
        encoding="utf-8",
        pretty_print=True,
    )


def write_document(data: bytes, stream: BinaryIO) -> None:
    """Write a finished feed document to *stream* and flush it.

    I/O errors propagate to the caller.
    """
    stream.write(data)
    stream.flush()
