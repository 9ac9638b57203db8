"""Domain-term boost rules.

Rules are evaluated in a single, fixed priority order and are mutually
exclusive: the first rule whose predicate holds sets the multiplier and no
other rule is consulted. An item matching no rule keeps a multiplier of 1.0.

Priority (rank: rule, multiplier):

1. flagship         x5.0  flagship term present
2. products_multi   x4.0  product category, 2+ product names
3. products_single  x3.0  product category, exactly 1 product name
4. core_multi       x3.0  3+ core domain terms
5. core_pair        x2.0  exactly 2 core domain terms
6. core_agent       x2.5  exactly 1 core domain term plus an agent term
7. core_single      x1.5  exactly 1 core domain term
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from ..config import BoostConfig, Category

logger = logging.getLogger(__name__)

NO_BOOST = 1.0


@dataclass(frozen=True)
class BoostMatch:
    """Term matches found in one item's text."""

    category: Category
    has_flagship: bool
    product_matches: Tuple[str, ...]
    core_matches: Tuple[str, ...]
    has_agent: bool


@dataclass(frozen=True)
class BoostRule:
    """One prioritized boost rule."""

    name: str
    multiplier: float
    predicate: Callable[[BoostMatch, BoostConfig], bool]
    label: str


@dataclass(frozen=True)
class BoostResult:
    """Outcome of evaluating the rule table for one item."""

    multiplier: float = NO_BOOST
    rule: Optional[str] = None
    label: str = ""
    tags: List[str] = field(default_factory=list)


def _in_product_category(match: BoostMatch, config: BoostConfig) -> bool:
    return match.category == config.product_category


def build_boost_rules() -> Tuple[BoostRule, ...]:
    """The ordered rule table; position is priority."""
    return (
        BoostRule(
            name="flagship",
            multiplier=5.0,
            predicate=lambda m, c: m.has_flagship,
            label="flagship term",
        ),
        BoostRule(
            name="products_multi",
            multiplier=4.0,
            predicate=lambda m, c: _in_product_category(m, c) and len(m.product_matches) >= 2,
            label="multiple product mentions",
        ),
        BoostRule(
            name="products_single",
            multiplier=3.0,
            predicate=lambda m, c: _in_product_category(m, c) and len(m.product_matches) == 1,
            label="product mention",
        ),
        BoostRule(
            name="core_multi",
            multiplier=3.0,
            predicate=lambda m, c: len(m.core_matches) >= 3,
            label="3+ core domain terms",
        ),
        BoostRule(
            name="core_pair",
            multiplier=2.0,
            predicate=lambda m, c: len(m.core_matches) == 2,
            label="2 core domain terms",
        ),
        BoostRule(
            name="core_agent",
            multiplier=2.5,
            predicate=lambda m, c: len(m.core_matches) == 1 and m.has_agent,
            label="agent + core domain term",
        ),
        BoostRule(
            name="core_single",
            multiplier=1.5,
            predicate=lambda m, c: len(m.core_matches) == 1,
            label="1 core domain term",
        ),
    )


BOOST_RULES = build_boost_rules()


def match_terms(text: str, category: Category, config: BoostConfig) -> BoostMatch:
    """Find boost vocabulary in case-folded text."""
    text = (text or "").lower()
    return BoostMatch(
        category=category,
        has_flagship=config.flagship_term in text,
        product_matches=tuple(t for t in config.product_terms if t in text),
        core_matches=tuple(t for t in config.core_terms if t in text),
        has_agent=any(t in text for t in config.agent_terms),
    )


def evaluate_boost(
    text: str,
    category: Category,
    config: BoostConfig,
    rules: Tuple[BoostRule, ...] = BOOST_RULES,
) -> BoostResult:
    """Apply the first matching rule to an item's text."""
    match = match_terms(text, category, config)

    for rule in rules:
        if not rule.predicate(match, config):
            continue

        tags: List[str] = []
        if rule.name == "flagship":
            tags.append(config.flagship_term)
        elif rule.name.startswith("products"):
            tags.extend(match.product_matches)

        return BoostResult(
            multiplier=rule.multiplier,
            rule=rule.name,
            label=rule.label,
            tags=tags,
        )

    return BoostResult()
