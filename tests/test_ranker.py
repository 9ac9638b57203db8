"""Tests for the category ranker."""

import pytest

from codedigest.config import Category, ConfigModel, Period, RankingConfig
from codedigest.ranking import CategoryRanker

from .conftest import NOW, FakeJudge, FakeScoreStore, make_item


@pytest.fixture
def ranker_for(config):
    def _make(store=None, judge=None, cfg=None):
        return CategoryRanker(cfg or config, store or FakeScoreStore(), judge)

    return _make


# =============================================================================
# Basic behaviour
# =============================================================================

class TestRankCategory:
    """Tests for CategoryRanker.rank_category."""

    async def test_empty_input(self, ranker_for):
        """No items means no ranking, without touching the store."""
        store = FakeScoreStore()
        ranked = await ranker_for(store).rank_category([], Category.AI_NEWS, 7, now=NOW)
        assert ranked == []
        assert store.requests == []

    async def test_non_positive_window_rejected(self, ranker_for):
        """The period window must be positive."""
        with pytest.raises(ValueError):
            await ranker_for().rank_category([make_item("a")], Category.AI_NEWS, 0, now=NOW)

    async def test_unknown_category_rejected(self, ranker_for):
        """Unknown categories are a configuration error."""
        with pytest.raises(ValueError):
            await ranker_for().rank_category([make_item("a")], "gossip", 7, now=NOW)

    async def test_items_outside_window_dropped(self, ranker_for):
        """Only items inside the period window are ranked."""
        items = [make_item("new", hours_ago=12), make_item("old", hours_ago=24 * 10)]
        ranked = await ranker_for().rank_category(items, Category.AI_NEWS, 7, now=NOW)
        assert [r.id for r in ranked] == ["new"]

    @pytest.mark.parametrize(
        "url",
        [
            "ftp://example.com/file",
            "example.com/no-scheme",
            "http://localhost:3000/post",
            "https://127.0.0.1/post",
        ],
    )
    async def test_items_with_unusable_urls_dropped(self, ranker_for, url):
        """Items without a public http(s) link are left out of the window."""
        items = [make_item("good"), make_item("bad", url=url)]
        ranked = await ranker_for().rank_category(items, Category.AI_NEWS, 7, now=NOW)
        assert [r.id for r in ranked] == ["good"]

    async def test_plain_http_url_kept(self, ranker_for):
        ranked = await ranker_for().rank_category(
            [make_item("a", url="http://example.com/a")], Category.AI_NEWS, 7, now=NOW
        )
        assert [r.id for r in ranked] == ["a"]

    async def test_title_only_item_scores_penalized_bm25(self, ranker_for, config):
        """A title-only item with no judgement uses 0.3 x BM25 in the LLM slot."""
        categories = dict(config.categories)
        categories[Category.AI_NEWS] = categories[Category.AI_NEWS].model_copy(update={"query": "foo"})
        cfg = ConfigModel(categories=categories)
        weights = cfg.categories[Category.AI_NEWS].weights

        ranked = await ranker_for(cfg=cfg).rank_category(
            [make_item("a", title="Foo", summary=None)], Category.AI_NEWS, 7, now=NOW
        )

        item = ranked[0]
        assert not item.has_llm_score
        assert item.bm25_score == pytest.approx(1.0)
        assert item.base_score == pytest.approx(weights.llm * 0.3 * 1.0 + weights.bm25 * 1.0)
        assert item.final_score == pytest.approx(0.485)

    async def test_flagship_item_scores_five_times_its_twin(self, ranker_for, stored_score):
        """Two otherwise identical items differ only by the flagship boost."""
        store = FakeScoreStore({"plain": stored_score(6, 6), "boosted": stored_score(6, 6)})
        items = [
            make_item("plain", title="Weekly update"),
            make_item("boosted", title="Sourcegraph weekly update"),
        ]
        ranked = await ranker_for(store).rank_category(items, Category.AI_NEWS, 7, now=NOW)
        by_id = {r.id: r for r in ranked}

        assert by_id["boosted"].base_score == pytest.approx(by_id["plain"].base_score)
        assert by_id["boosted"].final_score == pytest.approx(5 * by_id["plain"].base_score)
        assert [r.id for r in ranked] == ["boosted", "plain"]

    async def test_sorted_by_final_score(self, ranker_for, stored_score):
        """Output is ordered best first."""
        store = FakeScoreStore({"low": stored_score(2, 2), "high": stored_score(9, 9)})
        items = [make_item("low"), make_item("high")]
        ranked = await ranker_for(store).rank_category(items, Category.AI_NEWS, 7, now=NOW)
        assert [r.id for r in ranked] == ["high", "low"]
        assert ranked[0].final_score >= ranked[1].final_score

    async def test_ties_keep_input_order(self, ranker_for, stored_score):
        """Equal scores keep their relative input order."""
        store = FakeScoreStore({i: stored_score(6, 6) for i in ("x", "y", "z")})
        items = [make_item(i) for i in ("y", "x", "z")]
        ranked = await ranker_for(store).rank_category(items, Category.AI_NEWS, 7, now=NOW)
        assert [r.id for r in ranked] == ["y", "x", "z"]

    async def test_stored_judgement_used(self, ranker_for, stored_score):
        """A stored record supplies the LLM judgement."""
        store = FakeScoreStore({"a": stored_score(8, 6, ["code-search"])})
        ranked = await ranker_for(store).rank_category([make_item("a")], Category.AI_NEWS, 7, now=NOW)
        assert ranked[0].has_llm_score
        assert ranked[0].llm_relevance == 8
        assert ranked[0].llm_tags == ["code-search"]


# =============================================================================
# Failure handling
# =============================================================================

class TestFailureHandling:
    """Storage errors propagate; per-item problems degrade."""

    async def test_store_error_propagates(self, ranker_for):
        """A failing store aborts the ranking with its own exception."""
        store = FakeScoreStore(error=ConnectionError("database is down"))
        with pytest.raises(ConnectionError, match="database is down"):
            await ranker_for(store).rank_category([make_item("a")], Category.AI_NEWS, 7, now=NOW)

    async def test_malformed_record_treated_as_missing(self, ranker_for):
        """An invalid stored record falls back to BM25-only scoring."""
        store = FakeScoreStore({"a": {"llm_relevance": 42, "llm_usefulness": "lots"}})
        ranked = await ranker_for(store).rank_category([make_item("a")], Category.AI_NEWS, 7, now=NOW)
        assert len(ranked) == 1
        assert not ranked[0].has_llm_score

    async def test_dict_records_accepted(self, ranker_for):
        """Plain mapping records are validated into stored scores."""
        store = FakeScoreStore({"a": {"llm_relevance": 7, "llm_usefulness": 5, "llm_tags": []}})
        ranked = await ranker_for(store).rank_category([make_item("a")], Category.AI_NEWS, 7, now=NOW)
        assert ranked[0].has_llm_score

    async def test_failed_judge_batch_falls_back(self, ranker_for):
        """A judge failure leaves items on BM25 scores."""
        judge = FakeJudge(fail_on_batch=1)
        ranked = await ranker_for(judge=judge).rank_category(
            [make_item("a")], Category.AI_NEWS, 7, now=NOW
        )
        assert not ranked[0].has_llm_score


# =============================================================================
# On-demand judging
# =============================================================================

class TestOnDemandJudging:
    """Items without stored scores can be judged during ranking."""

    async def test_only_items_with_content_are_judged(self, ranker_for, stored_score):
        """Stored and title-only items are not sent to the judge."""
        store = FakeScoreStore({"stored": stored_score()})
        judge = FakeJudge()
        items = [
            make_item("stored"),
            make_item("fresh"),
            make_item("stub", title="Short headline", summary=None),
        ]
        ranked = await ranker_for(store, judge).rank_category(items, Category.AI_NEWS, 7, now=NOW)
        assert judge.batches == [["fresh"]]
        by_id = {r.id: r for r in ranked}
        assert by_id["fresh"].has_llm_score
        assert not by_id["stub"].has_llm_score

    async def test_judging_is_batched(self, ranker_for):
        """Items are judged in configured batch sizes."""
        cfg = ConfigModel(ranking=RankingConfig(llm_batch_size=2))
        judge = FakeJudge()
        items = [make_item(f"i{n}") for n in range(5)]
        await ranker_for(judge=judge, cfg=cfg).rank_category(items, Category.AI_NEWS, 7, now=NOW)
        assert [len(b) for b in judge.batches] == [2, 2, 1]


# =============================================================================
# Period weighting
# =============================================================================

class TestPeriodWeighting:
    """Recency only counts in the all-time view."""

    async def test_bounded_period_ignores_recency(self, ranker_for, stored_score):
        """Within a bounded period, age does not change the score."""
        store = FakeScoreStore({"new": stored_score(), "old": stored_score()})
        items = [make_item("new", hours_ago=6), make_item("old", hours_ago=24 * 5)]
        ranked = await ranker_for(store).rank_category(
            items, Category.AI_NEWS, 7, Period.WEEK, now=NOW
        )
        assert ranked[0].final_score == pytest.approx(ranked[1].final_score)

    async def test_all_time_view_prefers_recent(self, ranker_for, stored_score):
        """In the all-time view, newer items outrank otherwise equal older ones."""
        store = FakeScoreStore({"new": stored_score(), "old": stored_score()})
        items = [make_item("old", hours_ago=24 * 5), make_item("new", hours_ago=6)]
        ranked = await ranker_for(store).rank_category(
            items, Category.AI_NEWS, 90, Period.ALL, now=NOW
        )
        assert [r.id for r in ranked] == ["new", "old"]
        assert ranked[0].final_score > ranked[1].final_score

    def test_recency_weight(self, ranker_for, config):
        """The recency weight comes from the category only for all-time."""
        ranker = ranker_for()
        assert ranker.recency_weight(Category.AI_NEWS, Period.WEEK) == 0.0
        assert ranker.recency_weight(Category.AI_NEWS, None) == 0.0
        assert ranker.recency_weight(Category.AI_NEWS, Period.ALL) == (
            config.categories[Category.AI_NEWS].weights.recency
        )


class TestRankCategories:
    """Tests for CategoryRanker.rank_categories."""

    async def test_ranks_each_category(self, ranker_for):
        """Every requested category gets its own ranking."""
        items = {
            Category.AI_NEWS: [make_item("a")],
            Category.RESEARCH: [make_item("r1", category=Category.RESEARCH), make_item("r2", category=Category.RESEARCH)],
            Category.PODCASTS: [],
        }
        result = await ranker_for().rank_categories(items, 7, Period.WEEK, NOW)
        assert {c: len(r) for c, r in result.items()} == {
            Category.AI_NEWS: 1,
            Category.RESEARCH: 2,
            Category.PODCASTS: 0,
        }
