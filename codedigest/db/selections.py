"""Digest selection history."""

import logging

from psycopg.errors import DatabaseError
from psycopg_pool import AsyncConnectionPool

from ..config import Category, Period
from ..ranking.models import SelectionResult
from .connection import get_connection

logger = logging.getLogger(__name__)


async def save_digest_selections(
    pool: AsyncConnectionPool,
    selection: SelectionResult,
    category: Category,
    period: Period,
) -> None:
    """Record which items were served, in rank order, with their reasons."""
    if not selection.items:
        return

    rows = [
        (item.id, Category(category).value, Period(period).value, rank, selection.reasons.get(item.id))
        for rank, item in enumerate(selection.items, 1)
    ]
    try:
        async with get_connection(pool) as conn:
            async with conn.cursor() as cur:
                await cur.executemany(
                    """
                    INSERT INTO digest_selections (item_id, category, period, rank, diversity_reason)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    rows,
                )
    except DatabaseError as e:
        logger.error("Failed to save digest selections for %s/%s: %s", category, period, e)
        raise
