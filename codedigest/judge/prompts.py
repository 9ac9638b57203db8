"""Prompts for LLM relevance judging."""

from typing import Sequence

from ..config import Category
from ..models import FeedItem, has_real_content

BASE_TAGS = [
    "code-search",
    "semantic-search",
    "agent",
    "context",
    "devex",
    "devops",
    "enterprise",
    "research",
    "infra",
    "off-topic",
]

CATEGORY_FOCUS = {
    Category.NEWSLETTERS: (
        "technical content",
        "code search, coding agent capabilities, developer productivity with AI tools, "
        "context management for agents, information retrieval in codebases.",
    ),
    Category.PODCASTS: (
        "technical content",
        "code search, coding agent capabilities, developer productivity with AI tools, "
        "context management for agents, information retrieval in codebases.",
    ),
    Category.TECH_ARTICLES: (
        "technical content",
        "code search, coding agent capabilities, developer productivity with AI tools, "
        "context management for agents, information retrieval in codebases.",
    ),
    Category.AI_NEWS: (
        "AI news",
        "the biggest general updates in AI: acquisitions, new model releases, breakthroughs. "
        "Include significant AI developments even if not directly coding-related.",
    ),
    Category.PRODUCT_NEWS: (
        "product news",
        "updates from coding agent products and any other products that add codebase "
        "context to coding agents.",
    ),
    Category.COMMUNITY: (
        "community discussions",
        "coding agents, AI in developer workflows and how developers view these tools, "
        "code search.",
    ),
    Category.RESEARCH: (
        "research papers",
        "coding agents, coding agent benchmarks, information retrieval in codebases and "
        "developer workflows.",
    ),
}

SYSTEM_PROMPT = """You are an expert evaluator of {kind} for a "Code Intelligence Digest" service.

Evaluate each item for:
1. Relevance (0-10): Focus on {focus}
2. Usefulness (0-10): How useful is this for a senior developer or tech lead working with AI coding tools?
3. Tags: Assign relevant domain tags from: {tags}

Be objective. 5-6 is average, 7+ is relevant, 9-10 is essential, below 5 is weak.

Items with minimal content (only a title) must be scored conservatively (3-5)."""

MINIMAL_CONTENT_WARNING = (
    "WARNING: This item has minimal or no content beyond the title. "
    "Score it conservatively (3-5)."
)


def system_prompt(category: Category) -> str:
    """Category-specific system prompt."""
    kind, focus = CATEGORY_FOCUS[category]
    return SYSTEM_PROMPT.format(kind=kind, focus=focus, tags=", ".join(BASE_TAGS))


def batch_prompt(items: Sequence[FeedItem], category: Category) -> str:
    """User prompt listing a batch of items in order."""
    blocks = []
    for idx, item in enumerate(items):
        parts = [
            f"[{idx}] Title: {item.title}",
            f"Source: {item.source_title}",
            f"Summary: {item.summary or 'N/A'}",
        ]
        if item.content_snippet and len(item.content_snippet) > 50:
            parts.append(f"Content: {item.content_snippet[:500]}")
        if item.full_text and len(item.full_text) > 100:
            preview = 2000 if category == Category.RESEARCH else 1000
            parts.append(f"Full Text (preview): {item.full_text[:preview]}")
        if not has_real_content(item):
            parts.append(MINIMAL_CONTENT_WARNING)
        parts.append(f"URL: {item.url}")
        blocks.append("\n".join(parts))

    items_text = "\n\n---\n\n".join(blocks)
    return f"""Evaluate each item below. Return a JSON array with one entry per item, in order.

{items_text}

Return JSON array like: [{{"relevance": 8, "usefulness": 7, "tags": ["code-search"]}}, ...]"""
