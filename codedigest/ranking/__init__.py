"""Item ranking, scoring and selection."""

from .bm25 import BM25Index, query_terms_for, tokenize
from .boosts import BOOST_RULES, BoostResult, BoostRule, evaluate_boost
from .filters import apply_relevance_floor, has_more
from .fusion import ScoreFusion, llm_composite
from .models import LLMScore, RankedItem, SelectionResult, StoredScore
from .ranker import CategoryRanker, ScoreStore, print_ranking_summary
from .scorers import RecencyScorer, recency_score
from .selector import select_with_diversity

__all__ = [
    "BM25Index",
    "BOOST_RULES",
    "BoostResult",
    "BoostRule",
    "CategoryRanker",
    "LLMScore",
    "RankedItem",
    "RecencyScorer",
    "ScoreFusion",
    "ScoreStore",
    "SelectionResult",
    "StoredScore",
    "apply_relevance_floor",
    "evaluate_boost",
    "has_more",
    "llm_composite",
    "print_ranking_summary",
    "query_terms_for",
    "recency_score",
    "select_with_diversity",
    "tokenize",
]
