"""CLI entry point: python -m html2rss URL [options]"""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console

from html2rss import settings
from html2rss.config import CrawlConfig
from html2rss.fetcher import FetchError
from html2rss.pipeline import Html2Rss, Html2RssError
from html2rss.rss import write_document

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 4


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="html2rss",
        description="Generate an RSS 2.0 feed from a web page.",
    )
    parser.add_argument("url", metavar="URL",
                        help="URL of the page to convert to RSS")
    parser.add_argument("-n", "--max-pages", type=_positive_int,
                        default=settings.DEFAULT_MAX_PAGES, metavar="N",
                        help=f"Maximum number of pages to crawl (default: {settings.DEFAULT_MAX_PAGES})")
    parser.add_argument("-t", "--timeout-ms", type=_positive_int,
                        default=settings.DEFAULT_TIMEOUT_MS, metavar="MS",
                        help=f"Timeout in milliseconds for network requests (default: {settings.DEFAULT_TIMEOUT_MS})")
    parser.add_argument("--strict-feed", action="store_true", default=False,
                        help="Ignore a linked feed that fails validation and extract instead")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help=f"Logging level (default: {settings.LOG_LEVEL})")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    # stdout carries only the feed
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=settings.LOG_FORMAT,
        stream=sys.stderr,
    )
    console = Console(stderr=True, soft_wrap=True)

    try:
        config = CrawlConfig.from_env(
            max_pages=args.max_pages,
            timeout_ms=args.timeout_ms,
            strict_feed=args.strict_feed,
        )
        data = Html2Rss(config).run(args.url)
        write_document(data, sys.stdout.buffer)
    except (Html2RssError, FetchError, OSError) as exc:
        logger.debug("Run failed", exc_info=True)
        console.print(f"error: {exc}", markup=False, highlight=False, emoji=False)
        return EXIT_ERROR
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
