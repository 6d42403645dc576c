"""Error-page detection and final item filtering / deduplication."""

from __future__ import annotations

import logging
from itertools import islice
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from html2rss.extractors.urlnorm import UrlClassifier, canonicalize_url, is_absolute_url
from html2rss.items import FeedItem

logger = logging.getLogger(__name__)

_ERROR_TITLE_PHRASES: tuple[str, ...] = (
    "uh-oh", "uh oh", "error", "404", "page not found", "not found",
    "we're sorry", "sorry",
    "login", "log in", "sign in", "sign-in",
)

_ERROR_DESCRIPTION_PHRASES: tuple[str, ...] = (
    "error", "not found", "page not found", "uh-oh",
)

_ERROR_BODY_PHRASES: tuple[str, ...] = (
    "uh-oh", "page not found", "an error occurred",
    "we’re sorry", "we are sorry", "sorry, an error",
)

# Text fragments of <body> inspected for error phrases
_BODY_SCAN_FRAGMENTS = 200

PROMO_TITLE_WORDS: tuple[str, ...] = (
    "subscribe", "subscription", "donate", "support", "newsletter",
    "become a member", "subscribe to", "subscribe now",
)

# Commerce / fundraising paths dropped on top of the classifier's blacklist
_FILTERED_PATH_WORDS: tuple[str, ...] = ("/store", "/subscribe", "/subscriptions", "/donate")


def _body_text(soup: BeautifulSoup | None) -> str:
    if soup is None:
        return ""
    body = soup.body
    if body is None:
        return ""
    fragments = islice(body.stripped_strings, _BODY_SCAN_FRAGMENTS)
    return " ".join(fragments).lower()


def is_error_page(
    soup: BeautifulSoup | None,
    title: str,
    description: str | None = None,
) -> bool:
    """Return True for 404 / error / sign-in pages.

    Checks *title* and *description* first, then the opening text of the
    document body.
    """
    low_title = title.lower()
    if any(phrase in low_title for phrase in _ERROR_TITLE_PHRASES):
        return True

    if description:
        low_desc = description.lower()
        if any(phrase in low_desc for phrase in _ERROR_DESCRIPTION_PHRASES):
            return True

    body = _body_text(soup)
    return any(phrase in body for phrase in _ERROR_BODY_PHRASES)


def is_promotional_title(title: str) -> bool:
    low = title.lower()
    return any(word in low for word in PROMO_TITLE_WORDS)


def filter_items(
    items: list[FeedItem],
    base: str,
    classifier: UrlClassifier | None = None,
    *,
    declared_articles: bool = False,
) -> list[FeedItem]:
    """Drop junk, promotional and duplicate items, preserving order.

    Duplicates are detected on the canonical link; the first occurrence wins.
    Links that do not parse as absolute URLs skip the URL checks.
    *declared_articles* marks items taken from schema.org article nodes
    (see :meth:`UrlClassifier.is_acceptable_link`).
    """
    classifier = classifier or UrlClassifier()
    seen: set[str] = set()
    kept: list[FeedItem] = []

    for item in items:
        canon = canonicalize_url(item.link)

        if is_absolute_url(canon):
            if not classifier.is_acceptable_link(canon, base, declared_article=declared_articles):
                logger.debug("Dropping junk link %s", item.link)
                continue
            path = urlparse(canon).path.lower()
            if any(word in path for word in _FILTERED_PATH_WORDS):
                logger.debug("Dropping commerce link %s", item.link)
                continue

        if is_promotional_title(item.title):
            logger.debug("Dropping promotional item %r", item.title)
            continue

        if canon in seen:
            continue
        seen.add(canon)
        kept.append(item)

    return kept
