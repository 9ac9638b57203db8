"""Tests for the relevance floor and has-more signal."""

import pytest

from codedigest.config import CategoryConfig
from codedigest.ranking import SelectionResult, apply_relevance_floor, has_more

from .conftest import make_ranked


@pytest.fixture
def category_config():
    return CategoryConfig(
        name="Test", query="code search", half_life_days=3, max_items=3, min_relevance=5
    )


class TestRelevanceFloor:
    """Tests for apply_relevance_floor."""

    def test_off_topic_items_removed(self, category_config):
        """Items tagged off-topic never pass."""
        ranked = [
            make_ranked("a", 0.9, relevance=9, tags=["off-topic"]),
            make_ranked("b", 0.8, relevance=8),
        ]
        assert [r.id for r in apply_relevance_floor(ranked, category_config)] == ["b"]

    def test_threshold_lowered_until_enough(self, category_config):
        """The threshold drops one point at a time until max_items qualify."""
        ranked = [
            make_ranked("a", 0.9, relevance=8),
            make_ranked("b", 0.8, relevance=6),
            make_ranked("c", 0.7, relevance=4),
            make_ranked("d", 0.6, relevance=3.5),
            make_ranked("e", 0.5, relevance=2),
        ]
        kept = apply_relevance_floor(ranked, category_config)
        assert [r.id for r in kept] == ["a", "b", "c"]

    def test_threshold_never_below_minimum(self, category_config):
        """The floor stops at the minimum allowed relevance."""
        ranked = [
            make_ranked("a", 0.9, relevance=8),
            make_ranked("b", 0.8, relevance=2),
            make_ranked("c", 0.7, relevance=1),
        ]
        kept = apply_relevance_floor(ranked, category_config, min_allowed=3)
        assert [r.id for r in kept] == ["a"]

    def test_unjudged_items_held_to_minimum_only(self, category_config):
        """Items without an LLM judgement only need the minimum relevance."""
        ranked = [
            make_ranked("a", 0.9, relevance=8),
            make_ranked("b", 0.8, relevance=8),
            make_ranked("c", 0.7, relevance=8),
            make_ranked("bm25", 0.6, relevance=3, has_llm_score=False),
        ]
        kept = apply_relevance_floor(ranked, category_config)
        assert [r.id for r in kept] == ["a", "b", "c", "bm25"]

    def test_order_preserved(self, category_config):
        """Filtering never reorders items."""
        ranked = [make_ranked(i, 0.9 - n * 0.1, relevance=9 - n) for n, i in enumerate("abcd")]
        kept = apply_relevance_floor(ranked, category_config)
        assert [r.id for r in kept] == ["a", "b", "c", "d"]


class TestHasMore:
    """Tests for has_more."""

    def test_unselected_items_remain(self):
        ranked = [make_ranked("a", 0.9), make_ranked("b", 0.5)]
        selection = SelectionResult(items=ranked[:1])
        assert has_more(ranked, selection)

    def test_everything_selected(self):
        ranked = [make_ranked("a", 0.9), make_ranked("b", 0.5)]
        assert not has_more(ranked, SelectionResult(items=ranked))

    def test_leftovers_below_floor(self):
        """Leftovers at or under the quality floor do not count."""
        ranked = [make_ranked("a", 0.9), make_ranked("b", 0.1)]
        selection = SelectionResult(items=ranked[:1])
        assert not has_more(ranked, selection, quality_floor=0.2)
