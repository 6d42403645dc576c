"""URL resolution, canonicalization and article/listing/junk classification."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import (
    ParseResult,
    parse_qsl,
    unquote_plus,
    urlencode,
    urljoin,
    urlparse,
    urlunparse,
)

# Query parameters that carry no semantic meaning for content identity
_TRACKING_PARAMS: frozenset[str] = frozenset({"fbclid", "gclid"})
_TRACKING_PREFIX = "utm_"

# Query parameters that wrap the real destination of redirect/tracking links
_WRAPPER_PARAMS: frozenset[str] = frozenset({"url", "u"})

# Path fragments of section / index pages
LISTING_KEYWORDS: tuple[str, ...] = (
    "/news",
    "/section/",
    "/category/",
    "/topic/",
    "/topics/",
    "/tag/",
    "/tags/",
)

# Non-article keywords matched against the lowercased path
BLACKLIST_PATH_KEYWORDS: tuple[str, ...] = (
    "newsletter",
    "subscribe",
    "signup",
    "quizzes",
    "quiz",
    "jobs",
    "careers",
    "advert",
    "ads",
    "promo",
    "privacy",
    "terms",
    "/about",
    "login",
    "signin",
    "/stories/new",
    "/store",
    "/subscriptions",
    "/donate",
)

BLACKLIST_QUERY_KEYWORDS: tuple[str, ...] = ("newsletter", "subscribe", "signup")


# ---------------------------------------------------------------------------
# Pattern table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UrlPatterns:
    """Compiled URL patterns shared by the classifier and link heuristics.

    Attributes:
        date:            ``/YYYY/M/D/`` date segments.
        article:         Article tokens used when scoring candidate links.
        listing_article: Article tokens that exempt short paths from being
                         treated as listings (adds ``/entry/``).
        entry:           One publisher's ``/entry/<slug>_<id>`` article shape.
        entry_listing_suffixes: That publisher's generic section endings.
        entry_host:      Host substring the entry rules apply to.
    """

    date: re.Pattern[str]
    article: re.Pattern[str]
    listing_article: re.Pattern[str]
    entry: re.Pattern[str]
    entry_listing_suffixes: tuple[str, ...]
    entry_host: str

    @classmethod
    def compile(cls) -> UrlPatterns:
        return cls(
            date=re.compile(r"/\d{4}/\d{1,2}/\d{1,2}/"),
            article=re.compile(
                r"(/article/|/articles/|/story/|/stories/|/\d{4}-\d{2}-\d{2})",
                re.IGNORECASE,
            ),
            listing_article=re.compile(
                r"(/article/|/articles/|/story/|/stories/|/entry/|/\d{4}-\d{2}-\d{2})",
                re.IGNORECASE,
            ),
            entry=re.compile(r"/entry/[^/]+_[0-9]+$"),
            entry_listing_suffixes=("/news", "/news/", "/all"),
            entry_host="huffpost",
        )


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def _is_absolute(parsed: ParseResult) -> bool:
    return bool(parsed.scheme) and bool(parsed.netloc)


def is_absolute_url(url: str) -> bool:
    """Return True if *url* parses with both a scheme and a host."""
    try:
        return _is_absolute(urlparse(url))
    except ValueError:
        return False


def extract_host(url: str) -> str:
    """Return the lowercased hostname of *url* (no port), or ``""``."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def same_host(url: str, base: str) -> bool:
    """Return True if *url* and *base* point at the same host."""
    host = extract_host(url)
    return bool(host) and host == extract_host(base)


def _inner_wrapped_url(url: str) -> str | None:
    """Return the destination carried by a ``?url=`` / ``?u=`` wrapper link."""
    try:
        query = urlparse(url).query
    except ValueError:
        return None
    if not query:
        return None
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key in _WRAPPER_PARAMS and is_absolute_url(value):
            return value
    return None


def _embedded_url_param(raw: str) -> str | None:
    """Last-resort scan for ``url=...`` inside an otherwise unusable string."""
    idx = raw.find("url=")
    if idx < 0:
        return None
    value = unquote_plus(raw[idx + 4:].split("&", 1)[0]).strip()
    return value or None


def resolve_url(base: str, href: str | None) -> str | None:
    """Resolve *href* against *base*, unwrapping redirect/tracking wrappers.

    Returns ``None`` for empty input or when nothing usable can be derived.
    """
    if not href:
        return None
    raw = href.strip()
    if not raw:
        return None

    try:
        parsed = urlparse(raw)
        if parsed.scheme:
            resolved = raw
        else:
            resolved = urljoin(base, raw) if base else raw
        resolved_parsed = urlparse(resolved)
    except ValueError:
        return _embedded_url_param(raw)

    if resolved_parsed.scheme:
        if resolved_parsed.netloc:
            inner = _inner_wrapped_url(resolved)
            if inner:
                return inner
        return resolved

    return _embedded_url_param(raw)


def canonicalize_url(url: str) -> str:
    """Return a comparison key for *url*: no fragment, no tracking params.

    Strings without a scheme and host are returned unchanged.  Only used for
    equality checks, never for output.
    """
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return url
    if not _is_absolute(parsed):
        return url

    query = ""
    if parsed.query:
        kept = [
            (k, v)
            for k, v in parse_qsl(parsed.query, keep_blank_values=True)
            if not (
                k.lower().startswith(_TRACKING_PREFIX)
                or k.lower() in _TRACKING_PARAMS
            )
        ]
        query = urlencode(kept)

    return urlunparse(
        (
            parsed.scheme.lower(),
            parsed.netloc.lower(),
            parsed.path,
            parsed.params,
            query,
            "",
        ),
    )


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------

class UrlClassifier:
    """Decides whether a URL is a listing page or junk.  Stateless after init."""

    def __init__(self, patterns: UrlPatterns | None = None) -> None:
        self.patterns = patterns or UrlPatterns.compile()

    def is_section_page(self, url: str, base: str) -> bool:
        """Root path or a path naming a section/category/tag index."""
        if not same_host(url, base):
            return False
        path = urlparse(url).path
        if path in ("", "/"):
            return True
        lower = path.lower()
        return any(kw in lower for kw in LISTING_KEYWORDS)

    def is_listing_page(self, url: str, base: str) -> bool:
        """Return True if *url* looks like a section/index page of *base*'s site.

        URLs on another host are out of scope and never count as listings.
        Besides :meth:`is_section_page`, short paths (two segments or fewer)
        without a date or article token are treated as listings.
        """
        if not same_host(url, base):
            return False
        if self.is_section_page(url, base):
            return True

        path = urlparse(url).path
        segments = [s for s in path.split("/") if s]
        if len(segments) <= 2:
            looks_like_article = bool(
                self.patterns.date.search(path)
                or self.patterns.listing_article.search(path),
            )
            if not looks_like_article:
                return True
        return False

    def is_blacklisted(self, url: str) -> bool:
        """Return True if *url*'s path or query names obvious non-article content."""
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        query = parsed.query.lower()
        if query and any(kw in query for kw in BLACKLIST_QUERY_KEYWORDS):
            return True
        path = parsed.path.lower()
        return any(kw in path for kw in BLACKLIST_PATH_KEYWORDS)

    def is_acceptable_link(self, url: str, base: str, *, declared_article: bool = False) -> bool:
        """True unless *url* is a parseable URL that is blacklisted or a listing.

        With *declared_article* (the link comes from a schema.org article
        node) only section pages count as listings; the short-path guess
        is skipped.
        """
        if not is_absolute_url(url):
            # Unparseable links are kept as-is rather than dropped
            return True
        if self.is_blacklisted(url):
            return False
        if declared_article:
            return not self.is_section_page(url, base)
        return not self.is_listing_page(url, base)
