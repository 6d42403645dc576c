"""Unit tests for the FeedItem model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from html2rss.items import FeedItem


class TestFeedItem:
    def test_title_stripped(self):
        assert FeedItem(title="  Hello ", link="https://example.com/a").title == "Hello"

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            FeedItem(title="   ", link="https://example.com/a")

    def test_blank_optionals_become_none(self):
        item = FeedItem(title="T", link="https://example.com/a", description=" ", pub_date="", image="  ")
        assert item.description is None
        assert item.pub_date is None
        assert item.image is None

    def test_link_required(self):
        with pytest.raises(ValidationError):
            FeedItem(title="T")
