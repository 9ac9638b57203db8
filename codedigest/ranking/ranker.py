"""Category ranker that combines lexical, LLM and recency signals."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

import pendulum
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..config import Category, ConfigModel, Period, get_category_config
from ..judge import LLMJudge, score_with_llm
from ..models import FeedItem, LLMScore, StoredScore, has_public_url, has_real_content
from .bm25 import BM25Index, query_terms_for
from .fusion import ScoreFusion
from .models import RankedItem
from .scorers import age_in_days, recency_score

logger = logging.getLogger(__name__)
console = Console()


class ScoreStore(Protocol):
    """Lookup of pre-computed per-item scores."""

    async def load_scores(self, item_ids: Sequence[str]) -> Mapping[str, Any]:
        """Latest stored score per item; absent IDs have none."""
        ...


def _coerce_stored(item_id: str, record: Any) -> Optional[LLMScore]:
    """Judgement from a stored record, or None when it is unusable."""
    if record is None:
        return None
    try:
        stored = record if isinstance(record, StoredScore) else StoredScore.model_validate(record)
    except ValidationError as e:
        logger.warning("Ignoring malformed stored score for item %s: %s", item_id, e)
        return None
    return stored.to_llm_score()


class CategoryRanker:
    """Rank feed items within one category and period."""

    def __init__(
        self,
        config: ConfigModel,
        store: ScoreStore,
        judge: Optional[LLMJudge] = None,
    ) -> None:
        """
        Initialize category ranker.

        Args:
            config: Loaded configuration
            store: Pre-computed score lookup
            judge: Optional judge for items without a stored score
        """
        self.config = config
        self.store = store
        self.judge = judge

    def recency_weight(self, category: Category, period: Optional[Period]) -> float:
        """Recency only counts in the all-time view."""
        if period is not None and Period(period) == Period.ALL:
            return get_category_config(self.config, category).weights.recency
        return 0.0

    async def _judge_missing(
        self,
        items: Sequence[FeedItem],
        category: Category,
        judged: Dict[str, LLMScore],
    ) -> Dict[str, LLMScore]:
        if self.judge is None:
            return {}
        pending = [item for item in items if item.id not in judged and has_real_content(item)]
        if not pending:
            return {}
        logger.info("Judging %d items without stored scores for %s", len(pending), category.value)
        return await score_with_llm(
            self.judge, pending, category, self.config.ranking.llm_batch_size
        )

    async def rank_category(
        self,
        items: Sequence[FeedItem],
        category: Category,
        period_days: float,
        period: Optional[Period] = None,
        now: Optional[datetime] = None,
    ) -> List[RankedItem]:
        """
        Rank items for a category.

        Args:
            items: Candidate items, most recent first
            category: Category to rank under
            period_days: Window length; older items are dropped
            period: Browsing period; the all-time view weights recency
            now: Reference time (defaults to the current time)

        Returns:
            All items in the window, sorted by final score descending
        """
        category = Category(category)
        category_config = get_category_config(self.config, category)
        if period_days <= 0:
            raise ValueError(f"period_days must be positive, got {period_days}")

        if not items:
            return []

        if now is None:
            now = pendulum.now("UTC")

        logger.info("Ranking %d items for category: %s", len(items), category.value)

        window_items = []
        for item in items:
            if age_in_days(item.published_at, now) > period_days:
                continue
            if not has_public_url(item):
                logger.debug("Filtering out item with invalid URL: %s (%s)", item.id, item.url)
                continue
            window_items.append(item)
        logger.info("%d items within %s day window", len(window_items), period_days)
        if not window_items:
            return []

        index = BM25Index()
        index.add_documents(window_items)
        bm25_scores = index.normalize_scores(index.score(query_terms_for(category_config)))

        stored = await self.store.load_scores([item.id for item in window_items])

        judged: Dict[str, LLMScore] = {}
        for item in window_items:
            llm = _coerce_stored(item.id, stored.get(item.id))
            if llm is not None:
                judged[item.id] = llm
        judged.update(await self._judge_missing(window_items, category, judged))

        fusion = ScoreFusion(category, category_config, self.config.boosts)
        weight = self.recency_weight(category, period)

        ranked: List[RankedItem] = []
        for item in window_items:
            bm25 = bm25_scores.get(item.id, 0.0)
            recency = recency_score(item.published_at, category_config.half_life_days, now)
            llm = judged.get(item.id)
            try:
                ranked.append(fusion.fuse(item, bm25, llm, recency, weight, now))
            except ValueError as e:
                logger.warning("Scoring failed for item %s, using BM25 fallback: %s", item.id, e)
                ranked.append(fusion.fuse(item, bm25, None, recency, weight, now))

        ranked = sorted(ranked, key=lambda r: r.final_score, reverse=True)
        logger.info("Ranked %d items for category %s", len(ranked), category.value)
        return ranked

    async def rank_categories(
        self,
        items_by_category: Mapping[Category, Sequence[FeedItem]],
        period_days: float,
        period: Optional[Period] = None,
        now: Optional[datetime] = None,
    ) -> Dict[Category, List[RankedItem]]:
        """Rank several categories concurrently."""
        categories = list(items_by_category)
        results = await asyncio.gather(
            *(
                self.rank_category(items_by_category[c], c, period_days, period, now)
                for c in categories
            )
        )
        return dict(zip(categories, results))


def print_ranking_summary(ranked: Sequence[RankedItem], limit: int = 10) -> None:
    """Print ranking summary."""
    console.print(f"\n[bold]Ranking Summary:[/bold] {len(ranked)} items")
    if not ranked:
        return

    table = Table(title="Top Items")
    table.add_column("#", style="dim")
    table.add_column("Title", style="yellow")
    table.add_column("Source", style="cyan")
    table.add_column("Score", style="green")
    table.add_column("Breakdown", style="dim")

    for i, item in enumerate(ranked[:limit], 1):
        table.add_row(
            str(i),
            item.title,
            item.source_title,
            f"{item.final_score:.3f}",
            f"BM25:{item.bm25_score:.2f} LLM:{item.llm_relevance:.1f}/{item.llm_usefulness:.1f} "
            f"x{item.boost_multiplier}",
        )

    console.print(table)
