"""
Shared fixtures for the codedigest tests.

Provides item factories, a fixed reference time and in-process stand-ins
for the score store and the LLM judge so no database or API is needed.
"""

from typing import Dict, List, Optional, Sequence

import pendulum
import pytest

from codedigest.config import Category, ConfigModel
from codedigest.judge import LLMJudge
from codedigest.models import FeedItem, LLMScore, StoredScore
from codedigest.ranking import RankedItem

NOW = pendulum.datetime(2025, 6, 15, 12, 0, 0, tz="UTC")

LONG_SUMMARY = (
    "A detailed write-up that goes well beyond the headline and explains "
    "what changed, why it matters and how teams are using it."
)


def make_item(
    item_id: str,
    title: str = "Weekly roundup",
    summary: Optional[str] = LONG_SUMMARY,
    source: str = "Source A",
    url: Optional[str] = None,
    hours_ago: float = 2,
    category: Category = Category.AI_NEWS,
    **kwargs,
) -> FeedItem:
    """Build a feed item published ``hours_ago`` before NOW."""
    return FeedItem(
        id=item_id,
        title=title,
        summary=summary,
        source_title=source,
        url=url if url is not None else f"https://example.com/{item_id}",
        published_at=NOW.subtract(hours=hours_ago),
        category=category,
        **kwargs,
    )


def make_ranked(
    item_id: str,
    score: float,
    source: str = "Source A",
    url: Optional[str] = None,
    relevance: float = 7.0,
    tags: Optional[List[str]] = None,
    has_llm_score: bool = True,
    category: Category = Category.AI_NEWS,
) -> RankedItem:
    """Build a ranked item with a given final score."""
    return RankedItem(
        id=item_id,
        title=f"Item {item_id}",
        source_title=source,
        url=url if url is not None else f"https://example.com/{item_id}",
        published_at=NOW,
        category=category,
        llm_relevance=relevance,
        llm_usefulness=relevance,
        llm_tags=tags or [],
        has_llm_score=has_llm_score,
        base_score=score,
        final_score=score,
    )


class FakeScoreStore:
    """Score store backed by a dict; can be told to fail."""

    def __init__(self, scores: Optional[Dict[str, object]] = None, error: Optional[Exception] = None):
        self.scores = dict(scores or {})
        self.error = error
        self.saved: List[RankedItem] = []
        self.requests: List[List[str]] = []

    async def load_scores(self, item_ids: Sequence[str]) -> Dict[str, object]:
        self.requests.append(list(item_ids))
        if self.error is not None:
            raise self.error
        return {item_id: self.scores[item_id] for item_id in item_ids if item_id in self.scores}

    async def save_item_scores(self, items: Sequence[RankedItem], category: Category) -> None:
        self.saved.extend(items)
        for item in items:
            self.scores[item.id] = StoredScore(
                llm_relevance=item.llm_relevance,
                llm_usefulness=item.llm_usefulness,
                llm_tags=item.llm_tags,
            )


class FakeJudge(LLMJudge):
    """Judge returning fixed scores and recording its batches."""

    def __init__(self, relevance: float = 8.0, usefulness: float = 7.0, fail_on_batch: Optional[int] = None):
        self.relevance = relevance
        self.usefulness = usefulness
        self.fail_on_batch = fail_on_batch
        self.batches: List[List[str]] = []

    async def score_batch(self, items: Sequence[FeedItem], category: Category) -> Dict[str, LLMScore]:
        self.batches.append([item.id for item in items])
        if self.fail_on_batch == len(self.batches):
            raise RuntimeError("judge unavailable")
        return {
            item.id: LLMScore(relevance=self.relevance, usefulness=self.usefulness, tags=["agent"])
            for item in items
        }

    def get_usage_stats(self) -> Dict:
        return {"batches": len(self.batches)}


@pytest.fixture
def now():
    """Fixed reference time."""
    return NOW


@pytest.fixture
def config():
    """Default configuration."""
    return ConfigModel()


@pytest.fixture
def stored_score():
    """A stored judgement factory."""

    def _make(relevance: float = 6.0, usefulness: float = 6.0, tags: Optional[List[str]] = None) -> StoredScore:
        return StoredScore(llm_relevance=relevance, llm_usefulness=usefulness, llm_tags=tags or [])

    return _make
