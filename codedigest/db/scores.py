"""Item score storage."""

import json
import logging
from typing import Dict, Sequence

from psycopg.errors import DatabaseError
from psycopg_pool import AsyncConnectionPool

from ..config import Category
from ..models import StoredScore
from ..ranking.models import RankedItem
from .connection import get_connection

logger = logging.getLogger(__name__)


class PostgresScoreStore:
    """Load and save per-item scores in Postgres."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """Initialize score store with an open pool."""
        self.pool = pool

    async def load_scores(self, item_ids: Sequence[str]) -> Dict[str, StoredScore]:
        """
        Load the most recent score for each item.

        Returns:
            Mapping of item ID to stored score; unscored items are absent
        """
        if not item_ids:
            return {}

        try:
            async with get_connection(self.pool) as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT DISTINCT ON (item_id)
                            item_id, llm_relevance, llm_usefulness, llm_tags,
                            bm25_score, recency_score, final_score
                        FROM item_scores
                        WHERE item_id = ANY(%s)
                        ORDER BY item_id, scored_at DESC
                        """,
                        (list(item_ids),),
                    )
                    rows = await cur.fetchall()
        except DatabaseError as e:
            logger.error("Failed to load scores for %d items: %s", len(item_ids), e)
            raise

        scores: Dict[str, StoredScore] = {}
        for row in rows:
            tags = row["llm_tags"]
            if isinstance(tags, str):
                tags = json.loads(tags)
            scores[row["item_id"]] = StoredScore(
                llm_relevance=row["llm_relevance"],
                llm_usefulness=row["llm_usefulness"],
                llm_tags=tags or [],
                bm25_score=row["bm25_score"],
                recency_score=row["recency_score"],
                final_score=row["final_score"],
            )
        return scores

    async def save_item_scores(self, items: Sequence[RankedItem], category: Category) -> None:
        """Save ranked items' scores for history and reuse."""
        if not items:
            return

        try:
            async with get_connection(self.pool) as conn:
                async with conn.cursor() as cur:
                    await cur.executemany(
                        """
                        INSERT INTO item_scores (
                            item_id, category, bm25_score, llm_relevance, llm_usefulness,
                            llm_tags, recency_score, final_score, reasoning
                        ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                        """,
                        [
                            (
                                item.id,
                                Category(category).value,
                                item.bm25_score,
                                item.llm_relevance,
                                item.llm_usefulness,
                                json.dumps(item.llm_tags),
                                item.recency_score,
                                item.final_score,
                                item.reasoning,
                            )
                            for item in items
                        ],
                    )
        except DatabaseError as e:
            logger.error("Failed to save item scores for category %s: %s", category, e)
            raise

        logger.info("Saved %d item scores for category %s", len(items), Category(category).value)
