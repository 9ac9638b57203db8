"""Ranking models."""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from ..models import FeedItem, LLMScore, StoredScore


class RankedItem(FeedItem):
    """Feed item with its score breakdown for one ranking pass."""

    model_config = ConfigDict(frozen=True)

    bm25_score: float = Field(0.0, ge=0.0, le=1.0, description="Batch-normalized BM25 score")
    llm_relevance: float = Field(0.0, ge=0.0, le=10.0, description="LLM relevance (0-10)")
    llm_usefulness: float = Field(0.0, ge=0.0, le=10.0, description="LLM usefulness (0-10)")
    llm_tags: List[str] = Field(default_factory=list, description="LLM and boost tags")
    has_llm_score: bool = Field(False, description="Whether an LLM judgement was available")
    recency_score: float = Field(1.0, ge=0.2, le=1.0, description="Recency decay score")
    boost_multiplier: float = Field(1.0, ge=1.0, description="Applied boost multiplier")
    base_score: float = Field(0.0, ge=0.0, description="Weighted score before boosting")
    final_score: float = Field(0.0, ge=0.0, description="Boosted final score")
    reasoning: str = Field("", description="Human-readable score composition")


class SelectionResult(BaseModel):
    """Diversity-constrained selection of ranked items."""

    items: List[RankedItem] = Field(default_factory=list, description="Selected items, best first")
    reasons: Dict[str, str] = Field(default_factory=dict, description="Item ID -> selection reason")
    skipped: Dict[str, str] = Field(default_factory=dict, description="Item ID -> reason not selected")

    @property
    def ids(self) -> List[str]:
        """Selected item IDs in order."""
        return [item.id for item in self.items]


__all__ = ["LLMScore", "RankedItem", "SelectionResult", "StoredScore"]
