"""Database initialization and schema management."""

import logging

from psycopg.errors import DatabaseError
from psycopg_pool import AsyncConnectionPool

from .connection import get_connection

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
-- Per-item scores, one row per scoring pass
CREATE TABLE IF NOT EXISTS item_scores (
    id SERIAL PRIMARY KEY,
    item_id TEXT NOT NULL,
    category TEXT NOT NULL,
    bm25_score REAL NOT NULL DEFAULT 0,
    llm_relevance REAL NOT NULL CHECK (llm_relevance >= 0 AND llm_relevance <= 10),
    llm_usefulness REAL NOT NULL CHECK (llm_usefulness >= 0 AND llm_usefulness <= 10),
    llm_tags JSONB NOT NULL DEFAULT '[]'::jsonb,
    recency_score REAL,
    final_score REAL NOT NULL,
    reasoning TEXT,
    scored_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Selections served per category and period
CREATE TABLE IF NOT EXISTS digest_selections (
    id SERIAL PRIMARY KEY,
    item_id TEXT NOT NULL,
    category TEXT NOT NULL,
    period TEXT NOT NULL,
    rank INTEGER NOT NULL CHECK (rank >= 1),
    diversity_reason TEXT,
    selected_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_item_scores_item_id ON item_scores(item_id, scored_at DESC);
CREATE INDEX IF NOT EXISTS idx_item_scores_category ON item_scores(category);
CREATE INDEX IF NOT EXISTS idx_digest_selections_lookup ON digest_selections(category, period, selected_at);
"""


async def validate_connection(pool: AsyncConnectionPool) -> bool:
    """Validate database connection."""
    try:
        async with pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1 AS ok")
                result = await cur.fetchone()
                return result is not None and result["ok"] == 1
    except DatabaseError as e:
        logger.error("Database connection failed: %s", e)
        return False


async def init_database(pool: AsyncConnectionPool) -> None:
    """Initialize database schema."""
    try:
        async with get_connection(pool) as conn:
            async with conn.cursor() as cur:
                await cur.execute(SCHEMA_SQL)
        logger.info("Database schema initialized successfully")
    except DatabaseError as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
