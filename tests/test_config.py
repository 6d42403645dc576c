"""Unit tests for run configuration."""

from __future__ import annotations

import pytest

from html2rss import settings
from html2rss.config import CrawlConfig, parse_domain_list


class TestParseDomainList:
    def test_splits_and_lowercases(self):
        assert parse_domain_list(" Example.com, ,news.org ") == ("example.com", "news.org")

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty(self, raw):
        assert parse_domain_list(raw) == ()


class TestCrawlConfig:
    def test_defaults(self):
        config = CrawlConfig()
        assert config.max_pages == settings.DEFAULT_MAX_PAGES
        assert config.timeout_ms == 10_000
        assert config.allow_paywall_domains == ()
        assert config.strict_feed is False

    @pytest.mark.parametrize("kwargs", [{"max_pages": 0}, {"timeout_ms": 0}])
    def test_rejects_non_positive(self, kwargs):
        with pytest.raises(ValueError):
            CrawlConfig(**kwargs)

    def test_from_env_reads_allowlist(self):
        env = {settings.ALLOW_PAYWALL_ENV: "example.com,news.org"}
        config = CrawlConfig.from_env(env, max_pages=5)
        assert config.allow_paywall_domains == ("example.com", "news.org")
        assert config.max_pages == 5

    def test_from_env_without_variable(self):
        assert CrawlConfig.from_env({}).allow_paywall_domains == ()

    def test_explicit_domains_win(self):
        env = {settings.ALLOW_PAYWALL_ENV: "example.com"}
        config = CrawlConfig.from_env(env, allow_paywall_domains=("other.org",))
        assert config.allow_paywall_domains == ("other.org",)


class TestAllowsPaywall:
    @pytest.fixture
    def config(self):
        return CrawlConfig(allow_paywall_domains=("example.com",))

    def test_exact_host(self, config):
        assert config.allows_paywall("https://example.com/a")

    def test_subdomain(self, config):
        assert config.allows_paywall("https://www.Example.com/a")

    def test_lookalike_host(self, config):
        assert not config.allows_paywall("https://badexample.com/a")

    def test_no_host(self, config):
        assert not config.allows_paywall("/relative")

    def test_unparseable_url(self, config):
        assert not config.allows_paywall("http://[bad/feed")
