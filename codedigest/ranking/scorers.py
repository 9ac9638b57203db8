"""Recency scoring with exponential decay."""

import math
from datetime import datetime
from typing import Optional

import pendulum

from ..models import FeedItem

RECENCY_FLOOR = 0.2
SECONDS_PER_DAY = 86400.0


def age_in_days(published_at: datetime, now: Optional[datetime] = None) -> float:
    """Age of a timestamp in days, never negative."""
    if now is None:
        now = pendulum.now("UTC")
    if published_at.tzinfo is None:
        published_at = pendulum.instance(published_at, tz="UTC")
    if now.tzinfo is None:
        now = pendulum.instance(now, tz="UTC")
    return max(0.0, (now - published_at).total_seconds() / SECONDS_PER_DAY)


def recency_score(
    published_at: datetime,
    half_life_days: float,
    now: Optional[datetime] = None,
) -> float:
    """
    Decay from 1.0 at age zero towards the 0.2 floor.

    score = 0.2 + 0.8 * exp(-ln2 * age_days / half_life_days)
    """
    if half_life_days <= 0:
        raise ValueError(f"half_life_days must be positive, got {half_life_days}")

    age_days = age_in_days(published_at, now)
    decay = math.exp(-math.log(2) * age_days / half_life_days)
    return RECENCY_FLOOR + (1.0 - RECENCY_FLOOR) * decay


class RecencyScorer:
    """Score items by recency with a fixed half-life."""

    def __init__(self, half_life_days: float) -> None:
        """
        Initialize recency scorer.

        Args:
            half_life_days: Days for the score to fall halfway to its floor
        """
        if half_life_days <= 0:
            raise ValueError(f"half_life_days must be positive, got {half_life_days}")
        self.half_life_days = half_life_days

    def score(self, item: FeedItem, now: Optional[datetime] = None) -> float:
        """Score based on publication date."""
        return recency_score(item.published_at, self.half_life_days, now)
