"""Tests for the BM25 index and tokenizer."""

import math

import pytest

from codedigest.config import Category, ConfigModel
from codedigest.ranking.bm25 import BM25Index, query_terms_for, tokenize

from .conftest import make_item


# =============================================================================
# Tokenizer
# =============================================================================

class TestTokenize:
    """Tests for tokenize."""

    def test_lowercases_and_drops_short_tokens(self):
        """Tokens under three characters are dropped."""
        assert tokenize("AI is a Code-Search tool") == ["code", "search", "tool"]

    def test_empty_text(self):
        """Empty and None text give no tokens."""
        assert tokenize("") == []
        assert tokenize(None) == []

    def test_query_tokenized_like_documents(self):
        """Category queries go through the same tokenizer."""
        category_config = ConfigModel().categories[Category.AI_NEWS]
        terms = query_terms_for(category_config)
        assert "llm" in terms
        assert all(t == t.lower() and len(t) >= 3 for t in terms)


# =============================================================================
# Index scoring
# =============================================================================

class TestBM25Index:
    """Tests for BM25Index scoring."""

    def test_every_document_gets_a_score(self):
        """Documents without query terms score zero rather than going missing."""
        index = BM25Index()
        index.add_documents([
            make_item("a", title="Code search at scale", summary=None),
            make_item("b", title="Gardening tips", summary=None),
        ])
        scores = index.score(["code", "search"])
        assert set(scores) == {"a", "b"}
        assert scores["a"] > 0
        assert scores["b"] == 0.0

    def test_matching_document_outscores_non_matching(self):
        """A document containing the query term beats one without it."""
        index = BM25Index()
        index.add_documents([
            make_item("a", title="Refactoring legacy monorepos", summary=None),
            make_item("b", title="Release notes for the weekly update", summary=None),
        ])
        scores = index.score(["refactoring"])
        assert scores["a"] > scores["b"]

    def test_idf_formula(self):
        """IDF follows ln((N - df + 0.5) / (df + 0.5) + 1)."""
        index = BM25Index()
        index.add_documents([
            make_item("a", title="compiler internals", summary=None),
            make_item("b", title="database internals", summary=None),
        ])
        assert index.idf("compiler") == pytest.approx(math.log(1.5 / 1.5 + 1))
        assert index.idf("internals") == pytest.approx(math.log(0.5 / 2.5 + 1))

    def test_duplicate_query_terms_count_once(self):
        """Repeating a query term does not inflate scores."""
        index = BM25Index()
        index.add_documents([
            make_item("a", title="vector retrieval", summary=None),
            make_item("b", title="other topic", summary=None),
        ])
        assert index.score(["vector"]) == index.score(["vector", "vector"])

    def test_zero_token_documents(self):
        """Documents with no usable tokens score zero without errors."""
        index = BM25Index()
        index.add_documents([make_item("a", title="a b c", summary=None)])
        assert index.score(["code"]) == {"a": 0.0}

    def test_add_documents_replaces_batch(self):
        """Indexing a new batch discards the previous one."""
        index = BM25Index()
        index.add_documents([make_item("a", title="first batch", summary=None)])
        index.add_documents([make_item("b", title="second batch", summary=None)])
        assert index.total_docs == 1
        assert set(index.score(["batch"])) == {"b"}

    @pytest.mark.parametrize("tf", [1, 2, 3, 4, 5])
    def test_extra_term_occurrence_never_lowers_score(self, tf):
        """Adding one more occurrence of a query term raises the document's score."""
        filler = [
            make_item(f"f{n}", title="alpha bravo charlie delta golf hotel india juliet kilo lima", summary=None)
            for n in range(3)
        ]

        def score_with(count):
            index = BM25Index()
            title = " ".join(["search"] * count + ["code review notes"])
            index.add_documents([make_item("a", title=title, summary=None)] + filler)
            return index.score(["search"])["a"]

        assert score_with(tf) > score_with(tf - 1)

    def test_feed_tags_are_searchable(self):
        """Feed-supplied categories are part of the document."""
        index = BM25Index()
        index.add_documents([
            make_item("a", title="Weekly notes", summary=None, categories=["embeddings"]),
            make_item("b", title="Weekly notes", summary=None),
        ])
        scores = index.score(["embeddings"])
        assert scores["a"] > scores["b"]


# =============================================================================
# Normalization
# =============================================================================

class TestNormalizeScores:
    """Tests for BM25Index.normalize_scores."""

    def test_max_becomes_one(self):
        """Scores are divided by the batch maximum."""
        normalized = BM25Index.normalize_scores({"a": 4.0, "b": 1.0, "c": 0.0})
        assert normalized == {"a": 1.0, "b": 0.25, "c": 0.0}

    def test_all_zero(self):
        """A batch with no matches normalizes to zeros."""
        assert BM25Index.normalize_scores({"a": 0.0, "b": 0.0}) == {"a": 0.0, "b": 0.0}

    def test_empty(self):
        """An empty batch stays empty."""
        assert BM25Index.normalize_scores({}) == {}
