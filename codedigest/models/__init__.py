"""Data models for the Code Intelligence Digest."""

from .item import FeedItem, has_public_url, has_real_content, search_text
from .scores import LLMScore, StoredScore

__all__ = ["FeedItem", "LLMScore", "StoredScore", "has_public_url", "has_real_content", "search_text"]
