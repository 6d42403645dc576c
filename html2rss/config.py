"""html2rss.config — Run configuration.

Usage::

    from html2rss.config import CrawlConfig

    config = CrawlConfig(max_pages=10, timeout_ms=5_000)
    config = CrawlConfig.from_env(max_pages=10)   # reads the paywall allowlist

    config.allows_paywall("https://www.example.com/post")
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlparse

from html2rss import settings


def parse_domain_list(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated domain list into lowercased, non-empty entries."""
    if not raw or not raw.strip():
        return ()
    return tuple(
        part.strip().lower()
        for part in raw.split(",")
        if part.strip()
    )


@dataclass(frozen=True)
class CrawlConfig:
    """Settings for a single html2rss run.

    Attributes:
        max_pages:             Cap on emitted items and candidate fetches.
        timeout_ms:            Per-request timeout in milliseconds.
        allow_paywall_domains: Domains exempt from paywall skipping.  Matched
                               exactly or as a suffix (``example.com`` also
                               covers ``www.example.com``).
        strict_feed:           When ``True`` a linked feed that fails
                               validation is ignored and extraction runs
                               instead of emitting it verbatim.
    """

    max_pages: int = settings.DEFAULT_MAX_PAGES
    timeout_ms: int = settings.DEFAULT_TIMEOUT_MS
    allow_paywall_domains: tuple[str, ...] = field(default_factory=tuple)
    strict_feed: bool = False

    def __post_init__(self) -> None:
        if self.max_pages < 1:
            raise ValueError(f"max_pages must be >= 1; got {self.max_pages}")
        if self.timeout_ms < 1:
            raise ValueError(f"timeout_ms must be >= 1; got {self.timeout_ms}")

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> CrawlConfig:
        """Build a config, resolving the paywall allowlist from the environment."""
        env = os.environ if environ is None else environ
        domains = parse_domain_list(env.get(settings.ALLOW_PAYWALL_ENV))
        overrides.setdefault("allow_paywall_domains", domains)
        return cls(**overrides)  # type: ignore[arg-type]

    def allows_paywall(self, url: str) -> bool:
        """Return True if *url*'s host is on the paywall allowlist."""
        try:
            host = (urlparse(url).hostname or "").lower()
        except ValueError:
            return False
        if not host:
            return False
        return any(
            host == domain or host.endswith(f".{domain}")
            for domain in self.allow_paywall_domains
        )
