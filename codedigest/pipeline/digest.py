"""Digest assembly across categories."""

import asyncio
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from psycopg_pool import AsyncConnectionPool

from ..config import Category, ConfigModel, Period, get_category_config, get_period_config
from ..db import save_digest_selections
from ..judge import LLMJudge
from ..models import FeedItem
from ..ranking import (
    CategoryRanker,
    RankedItem,
    ScoreStore,
    SelectionResult,
    apply_relevance_floor,
    select_with_diversity,
)

logger = logging.getLogger(__name__)


class DigestService:
    """Rank, filter and select items for every requested category."""

    def __init__(
        self,
        config: ConfigModel,
        store: ScoreStore,
        judge: Optional[LLMJudge] = None,
        pool: Optional[AsyncConnectionPool] = None,
    ) -> None:
        """
        Initialize digest service.

        Args:
            config: Loaded configuration
            store: Pre-computed score lookup
            judge: Optional judge for unscored items
            pool: Connection pool for recording selections; not recorded when None
        """
        self.config = config
        self.ranker = CategoryRanker(config, store, judge)
        self.pool = pool

    def select(
        self,
        ranked: Sequence[RankedItem],
        category: Category,
        period: Period,
        limit: Optional[int] = None,
        max_per_source: Optional[int] = None,
        exclude_ids: Optional[Iterable[str]] = None,
    ) -> SelectionResult:
        """Relevance floor then diversity selection for one ranked category."""
        category_config = get_category_config(self.config, category)
        period_config = get_period_config(self.config, period)
        floored = apply_relevance_floor(
            ranked, category_config, self.config.ranking.min_allowed_relevance
        )
        return select_with_diversity(
            floored,
            category,
            max_per_source=max_per_source or period_config.max_per_source,
            custom_limit=limit,
            exclude_ids=exclude_ids,
            categories=self.config.categories,
        )

    async def build_digest(
        self,
        items_by_category: Mapping[Category, Sequence[FeedItem]],
        period: Period,
        limit: Optional[int] = None,
        max_per_source: Optional[int] = None,
        exclude_ids: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None,
    ) -> Dict[Category, SelectionResult]:
        """
        Build a digest for each category in the mapping.

        Categories are ranked concurrently; a storage error in any of them
        aborts the whole digest.
        """
        period = Period(period)
        period_config = get_period_config(self.config, period)
        excluded: List[str] = list(exclude_ids or ())

        ranked_by_category = await self.ranker.rank_categories(
            {Category(c): items for c, items in items_by_category.items()},
            period_config.days,
            period,
            now,
        )

        digest: Dict[Category, SelectionResult] = {}
        for category, ranked in ranked_by_category.items():
            digest[category] = self.select(
                ranked, category, period, limit, max_per_source, excluded
            )

        if self.pool is not None:
            await asyncio.gather(
                *(
                    save_digest_selections(self.pool, selection, category, period)
                    for category, selection in digest.items()
                )
            )

        logger.info(
            "Built %s digest: %s",
            period.value,
            ", ".join(f"{c.value}={len(s.items)}" for c, s in digest.items()),
        )
        return digest
