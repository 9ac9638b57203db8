"""Feed item model for items ingested from the aggregator."""

from datetime import datetime
from typing import List, Optional

import pendulum
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config.models import Category

# An item has real content when its summary/snippet says materially more than its title.
CONTENT_MARGIN_CHARS = 20
FULL_TEXT_MIN_CHARS = 100


class FeedItem(BaseModel):
    """Normalized, categorized feed item. Immutable once ingested."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Aggregator item ID")
    title: str = Field("", description="Item title")
    summary: Optional[str] = Field(None, description="Summary text")
    content_snippet: Optional[str] = Field(None, description="Content snippet")
    full_text: Optional[str] = Field(None, description="Cached full article text")
    source_title: str = Field("", description="Source (feed) name")
    url: str = Field("", description="Item URL")
    author: Optional[str] = Field(None, description="Author")
    published_at: datetime = Field(..., description="Publication timestamp (UTC)")
    category: Category = Field(..., description="Assigned category")
    categories: List[str] = Field(default_factory=list, description="Feed-supplied tags")

    @field_validator("published_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are UTC."""
        if v.tzinfo is None:
            return pendulum.instance(v, tz="UTC")
        return v


def has_real_content(item: FeedItem) -> bool:
    """Whether the item carries content beyond its title."""
    title_len = len(item.title or "")
    if item.summary and len(item.summary) > title_len + CONTENT_MARGIN_CHARS:
        return True
    if item.content_snippet and len(item.content_snippet) > title_len + CONTENT_MARGIN_CHARS:
        return True
    return bool(item.full_text and len(item.full_text) > FULL_TEXT_MIN_CHARS)


def search_text(item: FeedItem) -> str:
    """Case-folded title, summary and snippet."""
    return f"{item.title or ''} {item.summary or ''} {item.content_snippet or ''}".lower()


def has_public_url(item: FeedItem) -> bool:
    """Whether the item links to an http(s) page off the local machine."""
    url = (item.url or "").strip()
    if not url.startswith(("http://", "https://")):
        return False
    return "localhost" not in url and "127.0.0.1" not in url
