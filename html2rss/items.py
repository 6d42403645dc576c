"""Pydantic model for a candidate feed entry."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator


class FeedItem(BaseModel):
    """One ``<item>`` of the generated feed.

    ``pub_date`` keeps the source's raw format; it is normalized only when
    the feed is serialized.
    """

    title: str
    link: str
    description: str | None = None
    pub_date: str | None = None
    image: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("title must not be empty")
        return v

    @field_validator("link", mode="before")
    @classmethod
    def strip_url(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("description", "pub_date", "image", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v
