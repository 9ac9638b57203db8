"""Score records shared by the judge, storage and ranking layers."""

from typing import List, Optional

from pydantic import BaseModel, Field


class LLMScore(BaseModel):
    """LLM judgement of one item."""

    relevance: float = Field(..., ge=0.0, le=10.0, description="Relevance (0-10)")
    usefulness: float = Field(..., ge=0.0, le=10.0, description="Usefulness (0-10)")
    tags: List[str] = Field(default_factory=list, description="Topic tags")


class StoredScore(BaseModel):
    """Pre-computed score record loaded from storage."""

    llm_relevance: float = Field(..., ge=0.0, le=10.0)
    llm_usefulness: float = Field(..., ge=0.0, le=10.0)
    llm_tags: List[str] = Field(default_factory=list)
    bm25_score: Optional[float] = None
    recency_score: Optional[float] = None
    final_score: Optional[float] = None

    def to_llm_score(self) -> LLMScore:
        """Judgement part of the record."""
        return LLMScore(
            relevance=self.llm_relevance,
            usefulness=self.llm_usefulness,
            tags=list(self.llm_tags),
        )
