"""html2rss.fetcher - HTTP collaborator for the extraction pipeline.

The pipeline only needs one capability, ``fetch(url, timeout_ms) -> str``
raising :class:`FetchError`.  :class:`HttpFetcher` provides it with the
stdlib (``urllib``): a rotating browser User-Agent, standard Accept headers,
bounded redirects and a randomized pause before every request.

Usage::

    from html2rss.fetcher import HttpFetcher, fetch_with_retry

    fetcher = HttpFetcher()
    html = fetcher.fetch("https://example.com/news", 10_000)
    html = fetch_with_retry(fetcher, "https://example.com/2024/01/02/post", 10_000)
"""

from __future__ import annotations

import gzip
import logging
import random
import time
import urllib.error
import urllib.request
import zlib
from collections.abc import Callable
from typing import Protocol
from urllib.parse import urlparse

from html2rss import settings
from html2rss.config import CrawlConfig
from html2rss.rate_limit import RandomDelay

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public exception / protocol
# ---------------------------------------------------------------------------

class FetchError(RuntimeError):
    """Raised when a URL cannot be fetched.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status: int = 0,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class Fetcher(Protocol):
    """Anything that can turn a URL into page text."""

    def fetch(self, url: str, timeout_ms: int) -> str: ...


# ---------------------------------------------------------------------------
# Paywall hooks (detection disabled: every URL and page is accessible)
# ---------------------------------------------------------------------------

def is_paywalled_url(url: str) -> bool:
    return False


def is_paywalled_page(html: str) -> bool:
    return False


# ---------------------------------------------------------------------------
# HTTP implementation
# ---------------------------------------------------------------------------

_BASE_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}


class _BoundedRedirectHandler(urllib.request.HTTPRedirectHandler):
    max_redirections = settings.MAX_REDIRECTS


def _decode_response_body(raw: bytes, headers: object | None, url: str) -> str:
    encoding = ""
    if headers is not None:
        encoding = str(headers.get("Content-Encoding", "")).lower().strip()

    try:
        if encoding == "gzip":
            raw = gzip.decompress(raw)
        elif encoding in ("deflate", "zlib"):
            raw = zlib.decompress(raw)
    except (OSError, zlib.error) as exc:
        raise FetchError(f"{encoding} decompression failed for {url}: {exc}", url=url) from exc

    charset = "utf-8"
    if headers is not None:
        charset = headers.get_content_charset("utf-8") or "utf-8"
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


class HttpFetcher:
    """urllib-backed :class:`Fetcher`.

    Args:
        config:      Run configuration; only the paywall allowlist is read.
        delay:       Pause applied before every request.
        user_agents: Pool a User-Agent is drawn from per request.
        opener:      ``urllib`` opener; built with bounded redirects by default.
        rng:         Random source for User-Agent rotation.
    """

    def __init__(
        self,
        config: CrawlConfig | None = None,
        *,
        delay: RandomDelay | None = None,
        user_agents: tuple[str, ...] = settings.USER_AGENTS,
        opener: urllib.request.OpenerDirector | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if not user_agents:
            raise ValueError("user_agents must not be empty")
        self.config = config or CrawlConfig()
        self.delay = delay or RandomDelay()
        self.user_agents = user_agents
        self._opener = opener or urllib.request.build_opener(_BoundedRedirectHandler())
        self._rng = rng or random.Random()

    def pick_user_agent(self) -> str:
        return self._rng.choice(self.user_agents)

    def build_request(self, url: str) -> urllib.request.Request:
        headers = {"User-Agent": self.pick_user_agent(), **_BASE_HEADERS}
        return urllib.request.Request(url, headers=headers)

    def fetch(self, url: str, timeout_ms: int) -> str:
        """Fetch *url* and return the decoded body.

        Raises:
            FetchError: On unparseable URLs, unsupported schemes, HTTP errors (non-2xx),
                connection failures or a paywalled URL/page.
        """
        try:
            parsed = urlparse(url)
        except ValueError as exc:
            raise FetchError(f"Invalid URL {url!r}: {exc}", url=url) from exc
        if parsed.scheme not in ("http", "https"):
            raise FetchError(f"Unsupported URL scheme: {parsed.scheme!r}", url=url)

        allowed = self.config.allows_paywall(url)
        if not allowed and is_paywalled_url(url):
            logger.warning("Skipping paywalled URL: %s", url)
            raise FetchError(f"paywalled URL: {url}", url=url)

        self.delay.wait()
        req = self.build_request(url)
        logger.debug("GET %s (timeout %dms)", url, timeout_ms)

        try:
            with self._opener.open(req, timeout=timeout_ms / 1000.0) as resp:
                status = getattr(resp, "status", 200) or 200
                body = _decode_response_body(resp.read(), resp.headers, url)
        except urllib.error.HTTPError as exc:
            raise FetchError(
                f"HTTP {exc.code} fetching {url}: {exc.reason}",
                url=url,
                status=exc.code,
            ) from exc
        except urllib.error.URLError as exc:
            raise FetchError(f"URL error fetching {url}: {exc.reason}", url=url) from exc
        except OSError as exc:
            raise FetchError(f"Network error fetching {url}: {exc}", url=url) from exc

        if not 200 <= status < 300:
            raise FetchError(f"HTTP {status} fetching {url}", url=url, status=status)

        if not allowed and is_paywalled_page(body):
            logger.warning("Skipping paywalled page: %s", url)
            raise FetchError(f"paywalled page: {url}", url=url, status=status)
        return body


# ---------------------------------------------------------------------------
# Retry helper
# ---------------------------------------------------------------------------

def backoff_delay(attempt: int) -> float:
    """Seconds to wait before retry number *attempt* (1-based)."""
    delay = settings.RETRY_BASE_DELAY * (2 ** (attempt - 1))
    return min(delay, settings.RETRY_MAX_DELAY)


def fetch_with_retry(
    fetcher: Fetcher,
    url: str,
    timeout_ms: int,
    max_retries: int = settings.CANDIDATE_MAX_RETRIES,
    *,
    sleep: Callable[[float], None] | None = None,
) -> str:
    """Call ``fetcher.fetch`` up to ``max_retries + 1`` times.

    Waits 1s, 2s, 4s ... (capped at 10s) between attempts and re-raises the
    last :class:`FetchError` once attempts are exhausted.
    """
    sleep = sleep or time.sleep
    last_exc: FetchError | None = None
    for attempt in range(max_retries + 1):
        if attempt > 0:
            delay = backoff_delay(attempt)
            logger.warning(
                "Retrying %s in %.1fs (attempt %d/%d)",
                url, delay, attempt + 1, max_retries + 1,
            )
            sleep(delay)
        try:
            return fetcher.fetch(url, timeout_ms)
        except FetchError as exc:
            logger.debug("Attempt %d/%d failed for %s: %s", attempt + 1, max_retries + 1, url, exc)
            last_exc = exc

    raise last_exc or FetchError(f"All retries exhausted for {url}", url=url)
