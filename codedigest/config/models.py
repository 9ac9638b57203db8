"""Configuration models."""

import logging
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class Category(str, Enum):
    """Topical categories an item can be ranked under."""

    NEWSLETTERS = "newsletters"
    PODCASTS = "podcasts"
    TECH_ARTICLES = "tech_articles"
    AI_NEWS = "ai_news"
    PRODUCT_NEWS = "product_news"
    COMMUNITY = "community"
    RESEARCH = "research"


class Period(str, Enum):
    """Time windows a digest can be browsed by."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


class ScoreWeights(BaseModel):
    """Linear weights for score fusion."""

    llm: float = Field(0.45, ge=0.0, le=1.0, description="Weight of the LLM composite")
    bm25: float = Field(0.35, ge=0.0, le=1.0, description="Weight of the BM25 score")
    recency: float = Field(0.2, ge=0.0, le=1.0, description="Weight of recency (all-time view only)")

    @model_validator(mode="after")
    def warn_on_weight_drift(self) -> "ScoreWeights":
        """Weights sum to 1.0 by convention only."""
        total = self.llm + self.bm25 + self.recency
        if abs(total - 1.0) > 0.001:
            logger.warning("Score weights sum to %.3f instead of 1.0", total)
        return self


class CategoryConfig(BaseModel):
    """Scoring parameters for one category."""

    name: str = Field(..., description="Display name")
    description: str = Field("", description="Short description of the category")
    query: str = Field(..., description="BM25 query string of domain terms")
    half_life_days: float = Field(..., gt=0.0, description="Recency decay half-life in days")
    max_items: int = Field(10, ge=1, le=100, description="Default number of items per digest")
    min_relevance: float = Field(5.0, ge=0.0, le=10.0, description="Minimum LLM relevance (0-10)")
    weights: ScoreWeights = Field(default_factory=ScoreWeights)


class PeriodConfig(BaseModel):
    """Time window parameters for one browsing period."""

    label: str = Field(..., description="Display label")
    days: int = Field(..., ge=1, description="Window length in days")
    half_life_days: float = Field(..., gt=0.0, description="Recency half-life for this window")
    max_per_source: int = Field(2, ge=1, description="Per-source cap in this window")


class BoostConfig(BaseModel):
    """Domain vocabulary for multiplicative boosts."""

    flagship_term: str = Field("sourcegraph", description="Highest-priority single term")
    product_category: Category = Field(
        Category.PRODUCT_NEWS,
        description="Category in which product-name boosts are active",
    )
    product_terms: List[str] = Field(
        default_factory=lambda: [
            "augment code",
            "claude code",
            "cursor",
            "windsurf",
            "warp",
            "greptile",
            "coderabbit",
            "codex",
            "gemini cli",
            "github copilot",
            "kilo",
        ],
        description="Product names boosted in the product category",
    )
    core_terms: List[str] = Field(
        default_factory=lambda: [
            "deep search",
            "code search",
            "code intelligence",
            "coding agent",
            "codebase understanding",
            "information retrieval",
            "context management",
            "context window",
            "software engineering",
            "benchmark",
            "evaluation",
            "developer productivity",
            "ai tooling",
        ],
        description="General domain terms",
    )
    agent_terms: List[str] = Field(
        default_factory=lambda: ["agent", "agentic"],
        description="Terms signalling agent-related content",
    )

    @field_validator("flagship_term")
    @classmethod
    def lower_flagship(cls, v: str) -> str:
        """Matching is case-folded."""
        if not v.strip():
            raise ValueError("flagship_term must not be empty")
        return v.strip().lower()

    @field_validator("product_terms", "core_terms", "agent_terms")
    @classmethod
    def lower_terms(cls, v: List[str]) -> List[str]:
        """Matching is case-folded."""
        return [t.strip().lower() for t in v if t.strip()]


class RankingConfig(BaseModel):
    """Ranking and selection defaults."""

    llm_batch_size: int = Field(30, ge=1, le=200, description="Items per LLM judge request")
    default_max_per_source: int = Field(2, ge=1, description="Per-source cap when none is given")
    min_allowed_relevance: float = Field(
        3.0, ge=0.0, le=10.0, description="Floor for adaptive relevance threshold"
    )


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("codedigest", description="Database name")
    user: str = Field("codedigest", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")


class LLMConfig(BaseModel):
    """LLM judge configuration."""

    provider: str = Field("openai", description="LLM provider (openai, heuristic)")
    model: str = Field("gpt-4o-mini", description="Model name")
    api_key_env: Optional[str] = Field("OPENAI_API_KEY", description="Environment variable for API key")
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")
    base_url: Optional[str] = Field(None, description="Base URL for an OpenAI-compatible API")
    max_tokens: int = Field(4000, ge=100, description="Completion token budget per batch")


def _default_categories() -> Dict[Category, CategoryConfig]:
    def weights(llm: float, bm25: float, recency: float) -> ScoreWeights:
        return ScoreWeights(llm=llm, bm25=bm25, recency=recency)

    return {
        Category.NEWSLETTERS: CategoryConfig(
            name="Newsletters",
            description="Curated newsletters and columns on code intelligence and developer tools",
            query="code search semantic search codebase intelligence agents code review devtools IDE",
            half_life_days=3,
            weights=weights(0.45, 0.35, 0.2),
        ),
        Category.PODCASTS: CategoryConfig(
            name="Podcasts",
            description="Podcast episodes about AI, coding, and developer tools",
            query="AI coding podcast agents code search LLM developer productivity tools infrastructure",
            half_life_days=7,
            weights=weights(0.5, 0.3, 0.2),
        ),
        Category.TECH_ARTICLES: CategoryConfig(
            name="Tech Articles",
            description="In-depth technical articles and essays on code and development",
            query=(
                "code search semantic search codebase refactoring agents code intelligence "
                "testing CI/CD architecture patterns"
            ),
            half_life_days=5,
            weights=weights(0.4, 0.4, 0.2),
        ),
        Category.AI_NEWS: CategoryConfig(
            name="AI News",
            description="AI model releases, research, and infrastructure news relevant to developers",
            query=(
                "LLM transformer model reasoning AI inference coding agents foundation models "
                "context window"
            ),
            half_life_days=2,
            weights=weights(0.45, 0.35, 0.2),
        ),
        Category.PRODUCT_NEWS: CategoryConfig(
            name="Product News",
            description="Tool releases, feature announcements, and changelogs for dev tools",
            query=(
                "release feature announcement changelog IDE debugger code review tool "
                "productivity integrations"
            ),
            half_life_days=4,
            weights=weights(0.45, 0.35, 0.2),
        ),
        Category.COMMUNITY: CategoryConfig(
            name="Community",
            description="Discussions and posts from Reddit, forums, and community channels",
            query=(
                "code search agents devtools codebase refactoring code review testing CI/CD "
                "best practices"
            ),
            half_life_days=3,
            min_relevance=4,
            weights=weights(0.45, 0.35, 0.2),
        ),
        Category.RESEARCH: CategoryConfig(
            name="Research",
            description="Academic papers on software engineering, IR, PL, and ML for code",
            query=(
                "semantic search code search program synthesis AST machine learning "
                "software engineering empirical study"
            ),
            half_life_days=10,
            weights=weights(0.5, 0.3, 0.2),
        ),
    }


def _default_periods() -> Dict[Period, PeriodConfig]:
    return {
        Period.DAY: PeriodConfig(label="Daily", days=1, half_life_days=0.5, max_per_source=1),
        Period.WEEK: PeriodConfig(label="Weekly", days=7, half_life_days=3, max_per_source=2),
        Period.MONTH: PeriodConfig(label="Monthly", days=30, half_life_days=10, max_per_source=3),
        Period.ALL: PeriodConfig(label="All-time", days=90, half_life_days=30, max_per_source=4),
    }


class ConfigModel(BaseModel):
    """Main configuration model."""

    categories: Dict[Category, CategoryConfig] = Field(default_factory=_default_categories)
    periods: Dict[Period, PeriodConfig] = Field(default_factory=_default_periods)
    boosts: BoostConfig = Field(default_factory=BoostConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)

    @model_validator(mode="after")
    def require_full_coverage(self) -> "ConfigModel":
        """Every known category and period must be configured."""
        missing_categories = [c.value for c in Category if c not in self.categories]
        if missing_categories:
            raise ValueError(f"Missing category configuration: {', '.join(missing_categories)}")
        missing_periods = [p.value for p in Period if p not in self.periods]
        if missing_periods:
            raise ValueError(f"Missing period configuration: {', '.join(missing_periods)}")
        return self
