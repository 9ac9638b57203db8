"""Score pre-computation run after each feed sync."""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence

import pendulum

from ..config import Category, ConfigModel, get_category_config
from ..judge import LLMJudge, score_with_llm
from ..models import FeedItem, StoredScore, has_real_content
from ..ranking import BM25Index, RankedItem, ScoreFusion, ScoreStore, query_terms_for
from ..ranking.scorers import recency_score

logger = logging.getLogger(__name__)


class WritableScoreStore(ScoreStore, Protocol):
    """Score store that also accepts new scores."""

    async def save_item_scores(self, items: Sequence[RankedItem], category: Category) -> None:
        ...


class InMemoryScoreStore:
    """Process-local score store, used when no database is configured."""

    def __init__(self, scores: Optional[Dict[str, StoredScore]] = None) -> None:
        self.scores: Dict[str, StoredScore] = dict(scores or {})

    async def load_scores(self, item_ids: Sequence[str]) -> Dict[str, StoredScore]:
        return {item_id: self.scores[item_id] for item_id in item_ids if item_id in self.scores}

    async def save_item_scores(self, items: Sequence[RankedItem], category: Category) -> None:
        for item in items:
            self.scores[item.id] = StoredScore(
                llm_relevance=item.llm_relevance,
                llm_usefulness=item.llm_usefulness,
                llm_tags=item.llm_tags,
                bm25_score=item.bm25_score,
                recency_score=item.recency_score,
                final_score=item.final_score,
            )


async def compute_and_save_scores(
    items: Sequence[FeedItem],
    category: Category,
    store: WritableScoreStore,
    judge: LLMJudge,
    config: ConfigModel,
    now: Optional[datetime] = None,
) -> int:
    """
    Judge and store scores for items that have none yet.

    BM25 statistics are taken over the whole batch so stored lexical scores
    are comparable. Only items with real content are sent to the judge;
    title-only items are left unstored and fall back to BM25 at ranking time.

    Returns:
        Number of items whose scores were saved
    """
    category = Category(category)
    category_config = get_category_config(config, category)
    if not items:
        return 0

    if now is None:
        now = pendulum.now("UTC")

    stored = await store.load_scores([item.id for item in items])
    pending = [item for item in items if item.id not in stored]
    if not pending:
        logger.info("All %d items already scored for %s", len(items), category.value)
        return 0

    judgeable = [item for item in pending if has_real_content(item)]
    logger.info(
        "Computing scores for %d new items in %s (%d title-only)",
        len(pending),
        category.value,
        len(pending) - len(judgeable),
    )
    judged = await score_with_llm(judge, judgeable, category, config.ranking.llm_batch_size)
    if not judged:
        return 0

    index = BM25Index()
    index.add_documents(items)
    bm25_scores = index.normalize_scores(index.score(query_terms_for(category_config)))

    fusion = ScoreFusion(category, category_config, config.boosts)
    scored: List[RankedItem] = []
    for item in judgeable:
        llm = judged.get(item.id)
        if llm is None:
            continue
        recency = recency_score(item.published_at, category_config.half_life_days, now)
        scored.append(fusion.fuse(item, bm25_scores.get(item.id, 0.0), llm, recency, now=now))

    await store.save_item_scores(scored, category)
    return len(scored)
