"""html2rss.pipeline — page -> feed orchestration.

Stages run in order and the first one that produces output wins:

  1. linked feed  — ``<link rel="alternate">`` RSS/Atom, emitted verbatim
  2. structured   — JSON-LD article nodes on the start page
  3. heuristics   — :class:`HeuristicExtractor` (may fetch candidate pages)

Usage::

    from html2rss import html_to_feed

    data = html_to_feed("https://example.com/news", max_pages=10)
    sys.stdout.buffer.write(data)
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from html2rss.config import CrawlConfig
from html2rss.extractors.feed import find_linked_feed, validate_feed
from html2rss.extractors.filters import filter_items, is_error_page
from html2rss.extractors.heuristics import HeuristicExtractor
from html2rss.extractors.structured import extract_structured_items
from html2rss.extractors.urlnorm import UrlClassifier
from html2rss.fetcher import Fetcher, FetchError, HttpFetcher
from html2rss.items import FeedItem
from html2rss.rss import serialize_feed

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class Html2RssError(Exception):
    """Fatal error that ends a run."""


class InvalidURLError(Html2RssError):
    """The start URL is not an absolute http(s) URL."""


class NoArticlesError(Html2RssError):
    """Every stage came back empty."""

    def __init__(self, message: str = "no articles found") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def _with_newline(data: bytes) -> bytes:
    return data.rstrip(b"\n") + b"\n"


class Html2Rss:
    """Turn one start URL into feed bytes.

    Args:
        config:    Run configuration (defaults to :class:`CrawlConfig`).
        fetcher:   Page source; an :class:`HttpFetcher` bound to *config*
                   when omitted.
        extractor: Heuristic extractor for pages without feed or JSON-LD.
    """

    def __init__(
        self,
        config: CrawlConfig | None = None,
        fetcher: Fetcher | None = None,
        extractor: HeuristicExtractor | None = None,
    ) -> None:
        self.config = config or CrawlConfig()
        self.fetcher = fetcher or HttpFetcher(self.config)
        self.extractor = extractor or HeuristicExtractor(timeout_ms=self.config.timeout_ms)
        self.classifier: UrlClassifier = self.extractor.classifier

    def run(self, url: str) -> bytes:
        """Fetch *url* and return the feed document (ending in a newline).

        Raises:
            InvalidURLError: *url* is not an absolute http(s) URL.
            FetchError:      The start page could not be fetched.
            NoArticlesError: Nothing usable was found.
        """
        start_url = self.validate_start_url(url)
        html = self.fetcher.fetch(start_url, self.config.timeout_ms)
        soup = BeautifulSoup(html, "lxml")

        linked = self.linked_feed(soup, start_url)
        if linked is not None:
            return linked

        return self.feed_from_document(soup, start_url)

    @staticmethod
    def validate_start_url(url: str) -> str:
        candidate = (url or "").strip()
        try:
            parsed = urlparse(candidate)
        except ValueError as exc:
            raise InvalidURLError(f"invalid URL {url!r}: {exc}") from exc
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise InvalidURLError(f"invalid URL {url!r}: expected an absolute http(s) URL")
        return candidate

    def linked_feed(self, soup: BeautifulSoup, start_url: str) -> bytes | None:
        """Return the page's declared feed verbatim, or ``None`` to keep going."""
        feed_url = find_linked_feed(soup, start_url)
        if feed_url is None:
            return None

        logger.info("Found linked feed %s", feed_url)
        try:
            text = self.fetcher.fetch(feed_url, self.config.timeout_ms)
        except FetchError as exc:
            logger.warning("Linked feed %s could not be fetched: %s", feed_url, exc)
            return None

        check = validate_feed(text, feed_url)
        if not check.is_valid:
            if self.config.strict_feed:
                logger.warning("Ignoring invalid linked feed %s: %s", feed_url, check.error)
                return None
            logger.warning("Linked feed %s looks invalid (%s); emitting as-is", feed_url, check.error)
        else:
            logger.info("Linked feed %s has %d entries", feed_url, check.item_count)
        return text.encode("utf-8") + b"\n"

    def structured_items(self, soup: BeautifulSoup, start_url: str) -> list[FeedItem]:
        items = extract_structured_items(soup, start_url) or []
        items = [it for it in items if not is_error_page(soup, it.title, it.description)]
        return filter_items(items, start_url, self.classifier, declared_articles=True)

    def feed_from_document(self, soup: BeautifulSoup, start_url: str) -> bytes:
        """Run the structured-data and heuristic stages on a parsed start page."""
        items = self.structured_items(soup, start_url)
        if items:
            logger.info("Structured data yielded %d item(s)", len(items))
        else:
            items = self.extractor.extract(
                self.fetcher, soup, start_url, self.config.max_pages,
            )
            logger.info("Heuristics yielded %d item(s)", len(items))

        if not items:
            raise NoArticlesError()
        return _with_newline(serialize_feed(start_url, items))


def html_to_feed(
    url: str,
    *,
    config: CrawlConfig | None = None,
    fetcher: Fetcher | None = None,
    **config_overrides: object,
) -> bytes:
    """Convenience wrapper: build a :class:`Html2Rss` and run it on *url*.

    Keyword overrides (``max_pages=10``, ``strict_feed=True`` ...) are used
    only when *config* is not given.
    """
    if config is None:
        config = CrawlConfig(**config_overrides)  # type: ignore[arg-type]
    return Html2Rss(config, fetcher).run(url)
