"""Diversity-constrained selection of ranked items."""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional
from urllib.parse import urlsplit

from ..config import Category, CategoryConfig, ConfigModel
from .models import RankedItem, SelectionResult

logger = logging.getLogger(__name__)


def url_key(url: str) -> Optional[str]:
    """Host and path of a URL, or None when it cannot be keyed."""
    if not url:
        return None
    parts = urlsplit(url.strip())
    if not parts.netloc:
        return None
    return f"{parts.netloc.lower()}{parts.path.rstrip('/')}"


def deduplicate(items: Iterable[RankedItem], skipped: dict) -> List[RankedItem]:
    """Drop repeated IDs and repeated URLs, keeping the first (best) occurrence."""
    seen_ids = set()
    seen_urls = {}
    unique: List[RankedItem] = []

    for item in items:
        if item.id in seen_ids:
            continue
        seen_ids.add(item.id)

        key = url_key(item.url)
        if key is not None:
            if key in seen_urls:
                logger.debug(
                    "Deduplicating %r from %s (same URL as item %s)",
                    item.title,
                    item.source_title,
                    seen_urls[key],
                )
                skipped[item.id] = f"Duplicate URL of item {seen_urls[key]}"
                continue
            seen_urls[key] = item.id

        unique.append(item)

    return unique


def select_with_diversity(
    ranked_items: Iterable[RankedItem],
    category: Category,
    max_per_source: int = 2,
    custom_limit: Optional[int] = None,
    exclude_ids: Optional[Iterable[str]] = None,
    categories: Optional[Mapping[Category, CategoryConfig]] = None,
) -> SelectionResult:
    """
    Select a bounded, per-source-capped subset of ranked items.

    Items are walked in input (score) order. An item whose source already has
    ``max_per_source`` selections is deferred. When the capped walk leaves
    the selection short and the available sources cannot fill the limit
    under the cap, deferred items are admitted until the limit is reached.
    Sources that hit the cap most recently are relaxed first, so the source
    least represented so far fills the gap; within a source, deferred items
    keep input order.

    Args:
        ranked_items: Items sorted best first
        category: Category whose default limit applies
        max_per_source: Per-source cap
        custom_limit: Limit overriding the category default
        exclude_ids: IDs to leave out (already shown)
        categories: Category configuration (defaults to the built-in table)

    Returns:
        Selected items with a reason per item
    """
    if max_per_source < 1:
        raise ValueError(f"max_per_source must be at least 1, got {max_per_source}")

    if custom_limit is None:
        if categories is None:
            categories = ConfigModel().categories
        limit = categories[Category(category)].max_items
    else:
        limit = custom_limit
    if limit < 0:
        raise ValueError(f"limit must not be negative, got {limit}")

    excluded = set(exclude_ids or ())
    skipped: dict = {}
    candidates = deduplicate((i for i in ranked_items if i.id not in excluded), skipped)

    selected: List[RankedItem] = []
    reasons = {}
    source_counts: Counter = Counter()
    deferred: List[RankedItem] = []
    capped_at: Dict[str, int] = {}

    for item in candidates:
        if len(selected) >= limit:
            skipped.setdefault(item.id, f"Total limit reached ({limit})")
            continue
        count = source_counts[item.source_title]
        if count >= max_per_source:
            logger.debug("Deferring item from %s (source cap reached): %r", item.source_title, item.title)
            deferred.append(item)
            continue
        selected.append(item)
        source_counts[item.source_title] = count + 1
        if count + 1 == max_per_source:
            capped_at[item.source_title] = len(selected)
        reasons[item.id] = f"top-ranked (#{len(selected)})"

    available_sources = {item.source_title for item in candidates}
    sources_are_scarce = len(available_sources) * max_per_source < limit

    # Stable sort: latest-capped source first, input order within a source.
    backfill_order = sorted(deferred, key=lambda i: -capped_at[i.source_title])
    for item in backfill_order:
        if len(selected) < limit and sources_are_scarce:
            selected.append(item)
            source_counts[item.source_title] += 1
            reasons[item.id] = (
                f"diversity backfill (#{len(selected)}, source cap relaxed for {item.source_title})"
            )
        else:
            skipped[item.id] = (
                f"Source cap reached for {item.source_title} ({max_per_source}/{max_per_source})"
            )

    logger.info(
        "Selected %d items for %s (%d deferred by source cap)",
        len(selected),
        Category(category).value,
        len(deferred),
    )
    return SelectionResult(items=selected, reasons=reasons, skipped=skipped)
