"""LLM judge interface and implementations."""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI

from ..config import Category
from ..models import FeedItem, LLMScore
from .prompts import batch_prompt, system_prompt

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 5.0
JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")



def _clamp_score(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return NEUTRAL_SCORE
    if number != number:  # NaN
        return NEUTRAL_SCORE
    return max(0.0, min(10.0, number))


def parse_response(response: str, items: Sequence[FeedItem]) -> Dict[str, LLMScore]:
    """
    Map a JSON-array response back onto the batch.

    Missing entries in a valid array get neutral scores and extra entries are
    ignored. An unparseable response yields no judgements, so the batch stays
    on the BM25 fallback.
    """
    match = JSON_ARRAY_PATTERN.search(response or "")
    try:
        if not match:
            raise ValueError("No JSON array found in response")
        parsed = json.loads(match.group(0))
        if not isinstance(parsed, list):
            raise ValueError("Response is not a JSON array")
    except (ValueError, json.JSONDecodeError) as e:
        logger.error("Failed to parse judge response: %s (%r)", e, (response or "")[:500])
        return {}

    if len(parsed) != len(items):
        logger.warning(
            "Judge returned %d results for %d items; missing items get neutral scores",
            len(parsed),
            len(items),
        )

    results: Dict[str, LLMScore] = {}
    for idx, item in enumerate(items):
        entry = parsed[idx] if idx < len(parsed) and isinstance(parsed[idx], dict) else None
        if entry is None:
            results[item.id] = LLMScore(relevance=NEUTRAL_SCORE, usefulness=NEUTRAL_SCORE)
            continue

        tags = entry.get("tags")
        results[item.id] = LLMScore(
            relevance=_clamp_score(entry.get("relevance", NEUTRAL_SCORE)),
            usefulness=_clamp_score(entry.get("usefulness", NEUTRAL_SCORE)),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
        )
    return results


class LLMJudge(ABC):
    """Abstract base class for relevance judges."""

    @abstractmethod
    async def score_batch(
        self,
        items: Sequence[FeedItem],
        category: Category,
    ) -> Dict[str, LLMScore]:
        """
        Judge a batch of items.

        Args:
            items: Items to judge
            category: Category whose relevance criteria apply

        Returns:
            Mapping of item ID to judgement
        """
        pass

    @abstractmethod
    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        pass


class OpenAIJudge(LLMJudge):
    """OpenAI implementation of the relevance judge."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        max_tokens: int = 4000,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """
        Initialize OpenAI judge.

        Args:
            api_key: OpenAI API key
            model: Model name to use
            base_url: Custom base URL for OpenAI-compatible APIs
            max_tokens: Completion token budget per batch
            client: Preconfigured client (for testing)
        """
        self.client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model = model
        self.max_tokens = max_tokens
        self.total_tokens = 0
        self.api_calls = 0

    async def score_batch(
        self,
        items: Sequence[FeedItem],
        category: Category,
    ) -> Dict[str, LLMScore]:
        """Judge a batch with one chat completion."""
        if not items:
            return {}

        logger.info("Scoring %d items with %s for category %s", len(items), self.model, category.value)
        try:
            self.api_calls += 1
            response = await self.client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0.2,
                messages=[
                    {"role": "system", "content": system_prompt(category)},
                    {"role": "user", "content": batch_prompt(items, category)},
                ],
            )
        except Exception as e:
            logger.error("Judge API error for %d items, leaving them unjudged: %s", len(items), e)
            return {}

        if response.usage:
            self.total_tokens += response.usage.total_tokens

        content = response.choices[0].message.content or ""
        return parse_response(content, items)

    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        return {
            "total_tokens": self.total_tokens,
            "api_calls": self.api_calls,
            "model": self.model,
        }


class HeuristicJudge(LLMJudge):
    """Keyword heuristics used when no LLM is configured."""

    KEYWORDS_BY_DOMAIN: Dict[str, List[str]] = {
        "code-search": ["code search", "semantic search", "cross-reference", "codebase", "navigation", "indexing"],
        "semantic-search": ["semantic search", "embeddings", "rag", "vector", "retrieval"],
        "agent": ["agent", "agentic", "tool use", "planning", "orchestration", "multi-step"],
        "context": ["context window", "token budget", "context length", "compression", "summarization"],
        "devex": ["ide", "debugger", "refactoring", "productivity", "vscode", "intellij"],
        "devops": ["ci/cd", "testing", "deployment", "pipeline", "github actions", "test"],
        "enterprise": ["monorepo", "enterprise", "large codebase", "scale", "dependency", "modularization"],
        "research": ["paper", "arxiv", "research", "study", "empirical", "academic"],
    }
    OFF_TOPIC_KEYWORDS = ["marketing", "sales", "sports", "politics", "celebrity"]

    def __init__(self) -> None:
        """Initialize heuristic judge."""
        self.calls = 0

    def judge(self, item: FeedItem) -> LLMScore:
        """Judge a single item by keyword domains."""
        text = f"{item.title} {item.summary or ''}".lower()
        relevance = usefulness = NEUTRAL_SCORE
        tags: List[str] = []

        for tag, keywords in self.KEYWORDS_BY_DOMAIN.items():
            matches = sum(1 for kw in keywords if kw in text)
            if matches:
                boost = min(matches * 0.5, 2.0)
                relevance = min(10.0, relevance + boost)
                usefulness = min(10.0, usefulness + boost * 0.8)
                tags.append(tag)

        if not tags and any(kw in text for kw in self.OFF_TOPIC_KEYWORDS):
            tags.append("off-topic")
            relevance = max(0.0, relevance - 3)

        return LLMScore(
            relevance=round(relevance, 1),
            usefulness=round(usefulness, 1),
            tags=tags,
        )

    async def score_batch(
        self,
        items: Sequence[FeedItem],
        category: Category,
    ) -> Dict[str, LLMScore]:
        """Judge every item locally."""
        self.calls += 1
        return {item.id: self.judge(item) for item in items}

    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        return {"total_tokens": 0, "api_calls": 0, "model": "heuristic", "batches": self.calls}


async def score_with_llm(
    judge: LLMJudge,
    items: Sequence[FeedItem],
    category: Category,
    batch_size: int = 30,
) -> Dict[str, LLMScore]:
    """
    Judge items in fixed-size batches.

    A batch that fails is logged and skipped; its items simply stay unjudged.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    results: Dict[str, LLMScore] = {}
    total_batches = (len(items) + batch_size - 1) // batch_size
    for start in range(0, len(items), batch_size):
        batch = list(items[start:start + batch_size])
        batch_number = start // batch_size + 1
        logger.info(
            "Scoring batch %d of %d for category %s", batch_number, total_batches, category.value
        )
        try:
            results.update(await judge.score_batch(batch, category))
        except Exception as e:
            logger.warning("Judge batch %d failed, items fall back to BM25: %s", batch_number, e)
    return results


def get_judge(llm_config: Dict[str, Any]) -> LLMJudge:
    """Get configured judge, falling back to heuristics without an API key."""
    if llm_config.get("provider") == "openai":
        api_key = llm_config.get("api_key")
        if not api_key:
            logger.warning("No OpenAI API key found. Using heuristic judge.")
            return HeuristicJudge()
        return OpenAIJudge(
            api_key=api_key,
            model=llm_config.get("model", "gpt-4o-mini"),
            base_url=llm_config.get("base_url"),
            max_tokens=llm_config.get("max_tokens", 4000),
        )
    if llm_config.get("provider") != "heuristic":
        logger.warning("Unknown LLM provider %r. Using heuristic judge.", llm_config.get("provider"))
    return HeuristicJudge()
