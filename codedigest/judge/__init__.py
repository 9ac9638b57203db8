"""LLM relevance judging."""

from .llm_provider import (
    HeuristicJudge,
    LLMJudge,
    OpenAIJudge,
    get_judge,
    parse_response,
    score_with_llm,
)

__all__ = [
    "HeuristicJudge",
    "LLMJudge",
    "OpenAIJudge",
    "get_judge",
    "parse_response",
    "score_with_llm",
]
