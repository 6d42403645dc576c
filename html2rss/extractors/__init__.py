"""Extraction sub-package: deterministic, site-agnostic article discovery."""

from .feed import find_linked_feed, parse_feed, validate_feed
from .filters import filter_items, is_error_page, is_promotional_title
from .heuristics import HeuristicExtractor, LinkRule, default_link_rules
from .structured import extract_structured_items, is_article_node, node_to_item
from .text import has_mojibake, normalize_text
from .urlnorm import UrlClassifier, UrlPatterns, canonicalize_url, resolve_url, same_host

__all__ = [
    "HeuristicExtractor",
    "LinkRule",
    "UrlClassifier",
    "UrlPatterns",
    "canonicalize_url",
    "default_link_rules",
    "extract_structured_items",
    "filter_items",
    "find_linked_feed",
    "has_mojibake",
    "is_article_node",
    "is_error_page",
    "is_promotional_title",
    "node_to_item",
    "normalize_text",
    "parse_feed",
    "resolve_url",
    "same_host",
    "validate_feed",
]
