"""Score fusion: lexical, LLM and recency signals into one final score."""

import logging
import math
from datetime import datetime
from typing import List, Optional, Tuple

from ..config import BoostConfig, Category, CategoryConfig
from ..models import FeedItem, has_real_content, search_text
from .boosts import BOOST_RULES, BoostResult, BoostRule, evaluate_boost
from .models import LLMScore, RankedItem
from .scorers import age_in_days

logger = logging.getLogger(__name__)

RELEVANCE_SHARE = 0.7
USEFULNESS_SHARE = 0.3
TITLE_ONLY_PENALTY = 0.3


def llm_composite(llm: Optional[LLMScore], bm25_score: float, has_content: bool) -> float:
    """
    LLM-derived score in [0, 1].

    Without a judgement, BM25 stands in for items with real content and a
    penalized BM25 for title-only stubs.
    """
    if llm is not None:
        return (RELEVANCE_SHARE * llm.relevance + USEFULNESS_SHARE * llm.usefulness) / 10
    if has_content:
        return bm25_score
    return bm25_score * TITLE_ONLY_PENALTY


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3)."""
    return math.floor(value + 0.5)


class ScoreFusion:
    """Combine per-item signals using one category's weights and boost table."""

    def __init__(
        self,
        category: Category,
        category_config: CategoryConfig,
        boost_config: BoostConfig,
        rules: Tuple[BoostRule, ...] = BOOST_RULES,
    ) -> None:
        """
        Initialize score fusion for a category.

        Args:
            category: Category being ranked
            category_config: Weights and parameters for the category
            boost_config: Boost vocabulary
            rules: Ordered boost rule table
        """
        self.category = category
        self.category_config = category_config
        self.boost_config = boost_config
        self.rules = rules

    def base_score(
        self,
        composite: float,
        bm25_score: float,
        recency: float,
        recency_weight: float,
    ) -> float:
        """Weighted linear combination before boosting."""
        weights = self.category_config.weights
        return weights.llm * composite + weights.bm25 * bm25_score + recency_weight * recency

    def boost(self, item: FeedItem) -> BoostResult:
        """Boost for an item's text."""
        result = evaluate_boost(search_text(item), self.category, self.boost_config, self.rules)
        if result.rule is not None:
            logger.debug("Applied %sx boost (%s): %r", result.multiplier, result.label, item.title)
        return result

    def fuse(
        self,
        item: FeedItem,
        bm25_score: float,
        llm: Optional[LLMScore],
        recency: float,
        recency_weight: float = 0.0,
        now: Optional[datetime] = None,
    ) -> RankedItem:
        """
        Score one item.

        Args:
            item: Item to score
            bm25_score: Batch-normalized BM25 score
            llm: LLM judgement, if any
            recency: Recency decay score
            recency_weight: Weight of recency (zero for bounded periods)
            now: Reference time for the reasoning text

        Returns:
            Ranked item carrying the full score breakdown
        """
        bm25_score = _clamp_unit(bm25_score)
        content = has_real_content(item)
        composite = llm_composite(llm, bm25_score, content)
        base = self.base_score(composite, bm25_score, recency, recency_weight)
        boost = self.boost(item)
        final = base * boost.multiplier

        if llm is not None:
            relevance, usefulness = llm.relevance, llm.usefulness
            tags: List[str] = list(llm.tags)
        else:
            relevance = usefulness = float(round_half_up(bm25_score * 10))
            tags = []
        for tag in boost.tags:
            if tag not in tags:
                tags.append(tag)

        reasoning = self.reasoning(
            item, llm, bm25_score, recency, recency_weight, boost, content, now
        )

        return RankedItem(
            **item.model_dump(),
            bm25_score=bm25_score,
            llm_relevance=relevance,
            llm_usefulness=usefulness,
            llm_tags=tags,
            has_llm_score=llm is not None,
            recency_score=recency,
            boost_multiplier=boost.multiplier,
            base_score=base,
            final_score=final,
            reasoning=reasoning,
        )

    def reasoning(
        self,
        item: FeedItem,
        llm: Optional[LLMScore],
        bm25_score: float,
        recency: float,
        recency_weight: float,
        boost: BoostResult,
        has_content: bool,
        now: Optional[datetime] = None,
    ) -> str:
        """Diagnostic description of how the score was composed."""
        parts = []
        if llm is not None:
            parts.append(f"LLM: relevance={llm.relevance:.1f}, usefulness={llm.usefulness:.1f}")
        elif has_content:
            parts.append("LLM: none (BM25 fallback)")
        else:
            parts.append("LLM: none (title-only, BM25 x0.3)")

        parts.append(f"BM25={bm25_score:.2f}")

        if recency_weight > 0:
            age = age_in_days(item.published_at, now)
            parts.append(f"Recency={recency:.2f} (age: {round_half_up(age)}d)")

        if boost.multiplier > 1.0:
            parts.append(f"[BOOST] {boost.multiplier}x ({boost.label})")

        tags = llm.tags if llm is not None else []
        parts.append(f"Tags: {', '.join(tags) or 'none'}")
        return " | ".join(parts)
