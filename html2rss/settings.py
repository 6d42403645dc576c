"""Project-wide defaults for html2rss.

Values here are read once by :mod:`html2rss.config` and the CLI; nothing in
the extraction code reads environment variables directly.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Crawl bounds
# ---------------------------------------------------------------------------
DEFAULT_MAX_PAGES = 20

# Per-request timeout.  The CLI help text reports this same value.
DEFAULT_TIMEOUT_MS = 10_000

MAX_ARTICLE_ELEMENTS = 50
MAX_ANCHORS = 2000

# Ancestors inspected when looking for card/teaser containers around a link
MAX_CARD_DEPTH = 4

# ---------------------------------------------------------------------------
# Politeness
# ---------------------------------------------------------------------------
# Randomized pause (seconds) before every request
REQUEST_DELAY_RANGE: tuple[float, float] = (0.2, 0.6)

MAX_REDIRECTS = 10

# ---------------------------------------------------------------------------
# Retry policy (listing page -> candidate page fetches only)
# ---------------------------------------------------------------------------
CANDIDATE_MAX_RETRIES = 2
RETRY_BASE_DELAY = 1.0
RETRY_MAX_DELAY = 10.0

# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------
MAX_TEXT_LEN = 4096
TRUNCATION_MARKER = "… (truncated)"
FEED_DESCRIPTION = "Generated by html2rss"

# ---------------------------------------------------------------------------
# User-agent pool (rotated per request)
# ---------------------------------------------------------------------------
USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/117.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_6) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/16.6 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:120.0) Gecko/20100101 Firefox/120.0",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1",
)

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------
# Comma-separated domains exempt from paywall skipping (exact or suffix match)
ALLOW_PAYWALL_ENV = "HTML2RSS_ALLOW_PAYWALL_DOMAINS"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
