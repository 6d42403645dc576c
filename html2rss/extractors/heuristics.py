"""html2rss.extractors.heuristics — DOM heuristics for pages without feeds.

Stages (each stops once ``max_pages`` items are collected):
  1. article_elements — local ``<article>`` blocks (title, first link, first <p>)
  2. related          — "related / more from" link lists on single-article pages
  3. candidates       — same-host anchors scored by an ordered list of LinkRules
  4. fetch            — candidate pages (listing pages are expanded one level)
  5. per-page         — structured data first, then <meta>/heading fallbacks

The collected items finally pass through :func:`filter_items`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from bs4 import BeautifulSoup, Tag

from html2rss import settings
from html2rss.extractors.filters import filter_items, is_error_page
from html2rss.extractors.structured import extract_structured_items
from html2rss.extractors.text import normalize_text
from html2rss.extractors.urlnorm import (
    UrlClassifier,
    UrlPatterns,
    extract_host,
    resolve_url,
    same_host,
)
from html2rss.fetcher import Fetcher, FetchError, fetch_with_retry
from html2rss.items import FeedItem

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Selectors / tokens
# ---------------------------------------------------------------------------

_RELATED_SELECTORS: tuple[str, ...] = (
    ".related",
    ".related-articles",
    ".related-content",
    ".more-from",
    ".more-articles",
    ".promo-list",
    ".card-list",
)

# Class substrings of containers that wrap a single story teaser
_CARD_CLASS_TOKENS: tuple[str, ...] = (
    "card", "teaser", "promo", "headline", "story", "article",
)

# Anchor text longer than this reads like a headline
_HEADLINE_TEXT_LEN = 25

# <meta> name/property -> FeedItem field, first value per field wins
_META_FIELDS: dict[str, str] = {
    "og:title": "title",
    "twitter:title": "title",
    "title": "title",
    "og:description": "description",
    "twitter:description": "description",
    "description": "description",
    "og:image": "image",
    "twitter:image": "image",
    "image": "image",
    "article:published_time": "pub_date",
    "pubdate": "pub_date",
    "date": "pub_date",
}


# ---------------------------------------------------------------------------
# Link scoring rules
# ---------------------------------------------------------------------------

class RuleKind(StrEnum):
    SIGNAL = "signal"     # any matching signal marks the link article-like
    INCLUDE = "include"   # override: force article-like
    EXCLUDE = "exclude"   # override: force not article-like


@dataclass(frozen=True)
class LinkContext:
    """What the scoring rules may look at for one anchor."""

    url: str
    text: str
    has_image: bool
    in_card: bool
    base_host: str


@dataclass(frozen=True)
class LinkRule:
    name: str
    kind: RuleKind
    matches: Callable[[LinkContext], bool]


def default_link_rules(patterns: UrlPatterns) -> list[LinkRule]:
    """Return the built-in rules.  Overrides are tried in list order."""

    def entry_site(ctx: LinkContext) -> bool:
        return patterns.entry_host in ctx.base_host

    return [
        LinkRule("date_segment", RuleKind.SIGNAL, lambda ctx: bool(patterns.date.search(ctx.url))),
        LinkRule("article_token", RuleKind.SIGNAL, lambda ctx: bool(patterns.article.search(ctx.url))),
        LinkRule("headline_text", RuleKind.SIGNAL, lambda ctx: len(ctx.text) > _HEADLINE_TEXT_LEN),
        LinkRule("has_image", RuleKind.SIGNAL, lambda ctx: ctx.has_image),
        LinkRule("card_ancestor", RuleKind.SIGNAL, lambda ctx: ctx.in_card),
        LinkRule(
            "entry_article",
            RuleKind.INCLUDE,
            lambda ctx: entry_site(ctx) and bool(patterns.entry.search(ctx.url)),
        ),
        LinkRule(
            "entry_listing_suffix",
            RuleKind.EXCLUDE,
            lambda ctx: entry_site(ctx) and ctx.url.endswith(patterns.entry_listing_suffixes),
        ),
    ]


def is_article_like(ctx: LinkContext, rules: Sequence[LinkRule]) -> bool:
    """OR the signal rules, then let the first matching override decide."""
    verdict = any(r.matches(ctx) for r in rules if r.kind is RuleKind.SIGNAL)
    for rule in rules:
        if rule.kind is RuleKind.SIGNAL:
            continue
        if rule.matches(ctx):
            logger.debug("Override %s applied to %s", rule.name, ctx.url)
            return rule.kind is RuleKind.INCLUDE
    return verdict


def has_card_ancestor(el: Tag, max_depth: int = settings.MAX_CARD_DEPTH) -> bool:
    """True if one of the *max_depth* nearest ancestors has a card-like class."""
    node = el.parent
    depth = 0
    while node is not None and depth < max_depth:
        if isinstance(node, Tag):
            classes = node.get("class") or []
            if isinstance(classes, str):
                classes = [classes]
            cls = " ".join(classes).lower()
            if any(token in cls for token in _CARD_CLASS_TOKENS):
                return True
        node = node.parent
        depth += 1
    return False


# ---------------------------------------------------------------------------
# Small DOM helpers
# ---------------------------------------------------------------------------

def _first_text(el: Tag | None) -> str:
    """Normalized first non-blank text node under *el*."""
    if el is None:
        return ""
    return normalize_text(next(el.stripped_strings, ""))


def _anchor_text(a: Tag) -> str:
    return normalize_text(a.get_text(" "))


def looks_like_single_article(soup: BeautifulSoup) -> bool:
    """Return True if the page's metadata describes one article."""
    for meta in soup.find_all("meta"):
        name = meta.get("property") or meta.get("name")
        if not name:
            continue
        low = str(name).lower()
        if low == "og:type" and "article" in str(meta.get("content") or "").lower():
            return True
        if low in ("article:published_time", "pubdate"):
            return True
    return False


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------

class HeuristicExtractor:
    """Collect article items from an HTML page that offers no usable feed.

    Args:
        classifier:  URL classifier; its patterns also drive the link rules.
        rules:       Link scoring rules (default: :func:`default_link_rules`).
        timeout_ms:  Per-request timeout for candidate fetches.
        max_retries: Retries for pages reached through a listing page.
    """

    def __init__(
        self,
        classifier: UrlClassifier | None = None,
        rules: Sequence[LinkRule] | None = None,
        *,
        timeout_ms: int = settings.DEFAULT_TIMEOUT_MS,
        max_retries: int = settings.CANDIDATE_MAX_RETRIES,
    ) -> None:
        self.classifier = classifier or UrlClassifier()
        self.rules = list(rules) if rules is not None else default_link_rules(self.classifier.patterns)
        self.timeout_ms = timeout_ms
        self.max_retries = max_retries

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def extract(
        self,
        fetcher: Fetcher,
        soup: BeautifulSoup,
        base: str,
        max_pages: int,
    ) -> list[FeedItem]:
        items: list[FeedItem] = []

        self.extract_article_elements(soup, base, max_pages, items)
        logger.info("Stage article_elements: %d item(s)", len(items))

        if len(items) < max_pages:
            if looks_like_single_article(soup):
                self.extract_related(soup, base, max_pages, items)
                logger.info("Stage related: %d item(s)", len(items))

            candidates = self.build_candidates(soup, base, max_pages)
            logger.info("Stage candidates: %d candidate URL(s)", len(candidates))
            self.fetch_candidates(fetcher, candidates, base, max_pages, items)
            logger.info("Stage fetch: %d item(s)", len(items))

        return filter_items(items, base, self.classifier)

    # ------------------------------------------------------------------
    # Stage 1: <article> elements
    # ------------------------------------------------------------------

    def extract_article_elements(
        self,
        soup: BeautifulSoup,
        base: str,
        max_pages: int,
        items: list[FeedItem],
    ) -> None:
        for art in soup.find_all("article", limit=settings.MAX_ARTICLE_ELEMENTS):
            if len(items) >= max_pages:
                break

            title = _first_text(art.select_one("h1, h2, h3"))
            if not title:
                continue

            anchor = art.find("a")
            href = anchor.get("href") if anchor is not None else None
            link = resolve_url(base, href if isinstance(href, str) else None) or base

            para = art.find("p")
            description = normalize_text(para.get_text(" ")) if para is not None else ""

            if is_error_page(soup, title, description or None):
                continue
            if not self.classifier.is_acceptable_link(link, base):
                continue
            items.append(FeedItem(title=title, link=link, description=description or None))

    # ------------------------------------------------------------------
    # Stage 2: related-article lists
    # ------------------------------------------------------------------

    def extract_related(
        self,
        soup: BeautifulSoup,
        base: str,
        max_pages: int,
        items: list[FeedItem],
    ) -> None:
        for selector in _RELATED_SELECTORS:
            if len(items) >= max_pages:
                break
            for container in soup.select(selector):
                for a in container.find_all("a", href=True):
                    if len(items) >= max_pages:
                        break
                    link = resolve_url(base, a["href"])
                    if not link or not same_host(link, base):
                        continue
                    if any(it.link == link for it in items):
                        continue
                    if self.classifier.is_blacklisted(link) or self.classifier.is_listing_page(link, base):
                        continue
                    title = _anchor_text(a)
                    if not title or is_error_page(soup, title):
                        continue
                    items.append(FeedItem(title=title, link=link))

    # ------------------------------------------------------------------
    # Stage 3: candidate URLs
    # ------------------------------------------------------------------

    def build_candidates(self, soup: BeautifulSoup, base: str, max_pages: int) -> list[str]:
        """Return same-host, article-like, non-blacklisted links in page order."""
        base_host = extract_host(base)
        seen: set[str] = set()
        candidates: list[str] = []

        for a in soup.find_all("a", limit=settings.MAX_ANCHORS):
            href = a.get("href")
            if not isinstance(href, str):
                continue
            url = resolve_url(base, href)
            if not url or not same_host(url, base) or url in seen:
                continue

            ctx = LinkContext(
                url=url,
                text=_anchor_text(a),
                has_image=a.find("img") is not None,
                in_card=has_card_ancestor(a),
                base_host=base_host,
            )
            if is_article_like(ctx, self.rules) and not self.classifier.is_blacklisted(url):
                seen.add(url)
                candidates.append(url)
                if len(candidates) >= max_pages:
                    break
        return candidates

    # ------------------------------------------------------------------
    # Stage 4: fetch candidates
    # ------------------------------------------------------------------

    def fetch_candidates(
        self,
        fetcher: Fetcher,
        candidates: Sequence[str],
        base: str,
        max_pages: int,
        items: list[FeedItem],
    ) -> None:
        for cand in candidates:
            if len(items) >= max_pages:
                break
            try:
                html = fetcher.fetch(cand, self.timeout_ms)
            except FetchError as exc:
                logger.warning("Skipping candidate %s: %s", cand, exc)
                continue
            doc = BeautifulSoup(html, "lxml")

            if self.classifier.is_listing_page(cand, base):
                self.extract_from_listing(fetcher, doc, cand, base, max_pages, items)
                continue

            item = self.extract_item_from_doc(doc, cand, base)
            if item is not None:
                items.append(item)

    def extract_from_listing(
        self,
        fetcher: Fetcher,
        doc: BeautifulSoup,
        listing_url: str,
        base: str,
        max_pages: int,
        items: list[FeedItem],
    ) -> None:
        """Follow article-looking links of a listing page one level deep."""
        patterns = self.classifier.patterns
        attempted: set[str] = set()

        for a in doc.find_all("a", href=True):
            if len(items) >= max_pages:
                break
            url = resolve_url(listing_url, a["href"])
            if not url or not same_host(url, base) or url in attempted:
                continue
            if any(it.link == url for it in items):
                continue
            looks_article = bool(
                patterns.date.search(url)
                or patterns.article.search(url)
                or a.find("img") is not None,
            )
            if not looks_article:
                continue

            attempted.add(url)
            try:
                html = fetch_with_retry(fetcher, url, self.timeout_ms, self.max_retries)
            except FetchError as exc:
                logger.warning("Giving up on %s: %s", url, exc)
                continue
            item = self.extract_item_from_doc(BeautifulSoup(html, "lxml"), url, base)
            if item is not None:
                items.append(item)

    # ------------------------------------------------------------------
    # Stage 5: one page -> one item
    # ------------------------------------------------------------------

    def extract_item_from_doc(
        self,
        doc: BeautifulSoup,
        page_url: str,
        base: str,
    ) -> FeedItem | None:
        """Build one item for *page_url*, or ``None`` if it is not an article.

        Structured data wins when present and acceptable; otherwise the
        item is assembled from ``<meta>`` tags, headings and images.
        """
        structured = extract_structured_items(doc, page_url)
        if structured:
            item = structured[-1]
            if not is_error_page(doc, item.title, item.description):
                if self.classifier.is_acceptable_link(item.link, base):
                    return item
                logger.debug("Structured item on %s links to %s; using page metadata", page_url, item.link)

        found: dict[str, str] = {}
        for meta in doc.find_all("meta"):
            name = meta.get("property") or meta.get("name")
            content = meta.get("content")
            if not name or not isinstance(content, str):
                continue
            field_name = _META_FIELDS.get(str(name).lower())
            if field_name is None or field_name in found:
                continue
            if field_name == "image":
                value = resolve_url(page_url, content) or ""
            elif field_name == "pub_date":
                value = content.strip()
            else:
                value = normalize_text(content)
            if value:
                found[field_name] = value

        title = found.get("title") or _first_text(doc.select_one("h1, h2"))
        if not title:
            title = _first_text(doc.find("title"))
        if not title:
            return None

        image = found.get("image")
        if image is None:
            img = doc.find("img", src=True)
            if img is not None:
                image = resolve_url(page_url, img["src"])

        description = found.get("description")
        if is_error_page(doc, title, description):
            logger.debug("Error page at %s", page_url)
            return None
        if not self.classifier.is_acceptable_link(page_url, base):
            return None

        return FeedItem(
            title=title,
            link=page_url,
            description=description,
            pub_date=found.get("pub_date"),
            image=image,
        )
