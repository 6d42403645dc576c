"""html2rss - generate an RSS 2.0 feed from any web page.

Quick usage::

    from html2rss import html_to_feed

    data = html_to_feed("https://example.com/news", max_pages=10)
    print(data.decode("utf-8"))

With an explicit configuration and fetcher::

    from html2rss import CrawlConfig, Html2Rss, HttpFetcher

    config = CrawlConfig.from_env(max_pages=5, strict_feed=True)
    feed = Html2Rss(config, HttpFetcher(config)).run("https://example.com/")
"""

from html2rss.config import CrawlConfig
from html2rss.fetcher import FetchError, HttpFetcher, fetch_with_retry
from html2rss.items import FeedItem
from html2rss.pipeline import (
    Html2Rss,
    Html2RssError,
    InvalidURLError,
    NoArticlesError,
    html_to_feed,
)
from html2rss.rss import serialize_feed, write_document

__version__ = "0.1.0"
__all__ = [
    "CrawlConfig",
    "FeedItem",
    "FetchError",
    "Html2Rss",
    "Html2RssError",
    "HttpFetcher",
    "InvalidURLError",
    "NoArticlesError",
    "fetch_with_retry",
    "html_to_feed",
    "serialize_feed",
    "write_document",
]
