"""Relevance floor and underflow signalling applied around selection."""

import logging
from typing import List, Sequence

from ..config import CategoryConfig
from .models import RankedItem, SelectionResult

logger = logging.getLogger(__name__)

OFF_TOPIC_TAG = "off-topic"


def apply_relevance_floor(
    ranked: Sequence[RankedItem],
    category_config: CategoryConfig,
    min_allowed: float = 3.0,
) -> List[RankedItem]:
    """
    Drop off-topic and low-relevance items, preserving order.

    The threshold starts at the category's ``min_relevance`` and is lowered
    one point at a time, never below ``min_allowed``, until at least
    ``max_items`` items qualify. Items without an LLM judgement are held to
    ``min_allowed`` only.
    """
    on_topic = [item for item in ranked if OFF_TOPIC_TAG not in item.llm_tags]
    if len(on_topic) < len(ranked):
        logger.debug("Filtered %d off-topic items", len(ranked) - len(on_topic))

    target = category_config.max_items
    threshold = max(category_config.min_relevance, min_allowed)

    while True:
        kept = [
            item
            for item in on_topic
            if item.llm_relevance >= (threshold if item.has_llm_score else min_allowed)
        ]
        if len(kept) >= target or threshold <= min_allowed:
            break
        threshold = max(min_allowed, threshold - 1)
        logger.debug(
            "Lowering relevance threshold to %s (have %d, need %d)", threshold, len(kept), target
        )

    if threshold < category_config.min_relevance:
        logger.info(
            "Kept %d items (lowered threshold from %s to %s)",
            len(kept),
            category_config.min_relevance,
            threshold,
        )
    return kept


def has_more(
    ranked: Sequence[RankedItem],
    selection: SelectionResult,
    quality_floor: float = 0.0,
) -> bool:
    """Whether unselected items scoring above the floor remain."""
    chosen = set(selection.ids)
    return any(
        item.id not in chosen and item.final_score > quality_floor for item in ranked
    )
