# tests/unit/test_analysis_service.py
"""
Unit Tests for CommentAnalysisService
Tests tier ordering, caching, fallback and input validation
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock

from comment_pulse import analyze
from comment_pulse.app.shared_cache import InMemorySentimentStore
from comment_pulse.domain.models import (
    Category,
    Comment,
    ModerationResult,
    SentimentScore,
    ServiceClassification,
)
from comment_pulse.services.analysis_service import CommentAnalysisService
from comment_pulse.services.classification import fallback_classify
from comment_pulse.services.exceptions import LLMServiceError, ValidationError

SCOPE = {"ownerId": "user-1", "videoId": "video-1"}


def uncertain_text(n):
    """Long single-praise text the rules defer to the external service"""
    return f"Comment number {n} is great. " + "lorem ipsum dolor sit amet " * 12


class FakeClassifier:
    """Classifies every item as constructive and records calls"""

    def __init__(self, delay=0.0, omit_ids=(), intent="suggestion"):
        self.delay = delay
        self.omit_ids = set(omit_ids)
        self.intent = intent
        self.batches = []
        self.active = 0
        self.max_active = 0

    async def classify_batch(self, items):
        self.batches.append([item.id for item in items])
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return [
                ServiceClassification(
                    id=item.id,
                    category=Category.CONSTRUCTIVE,
                    sentiment=SentimentScore(0.3, 0.5, 0.2),
                    topics=["pacing"],
                    intent=self.intent,
                )
                for item in items
                if item.id not in self.omit_ids
            ]
        finally:
            self.active -= 1

    @property
    def requested_ids(self):
        return [i for batch in self.batches for i in batch]


@pytest.fixture
def comments():
    return [
        {"id": "c1", "text": "I love this video so much"},
        {"id": "c2", "text": "Check out my channel http://x.com"},
        {"id": "c3", "text": "worst video ever"},
        {"id": "c4", "text": uncertain_text(4)},
        {"id": "c5", "text": uncertain_text(5)},
        {"id": "c6", "text": "The audio was too quiet?"},
    ]


# ============================================================================
# Tier Ordering
# ============================================================================


class TestTierOrdering:
    """Test cache -> heuristics -> service -> fallback"""

    @pytest.mark.asyncio
    async def test_one_analysis_per_comment_in_order(self, app_config, comments):
        """Test totality"""
        service = CommentAnalysisService(classifier=FakeClassifier(), config=app_config)

        results = await service.analyze(comments)

        assert [r.comment_id for r in results] == [c["id"] for c in comments]
        for r in results:
            assert r.topics
            assert 0.0 <= r.toxicity <= 1.0

    @pytest.mark.asyncio
    async def test_only_uncertain_comments_reach_service(self, app_config, comments):
        classifier = FakeClassifier()
        service = CommentAnalysisService(classifier=classifier, config=app_config)

        results = await service.analyze(comments)
        by_id = {r.comment_id: r for r in results}

        assert sorted(classifier.requested_ids) == ["c4", "c5"]
        assert by_id["c1"].category == Category.POSITIVE
        assert by_id["c2"].category == Category.SPAM
        assert by_id["c3"].category == Category.NEGATIVE
        assert by_id["c4"].category == Category.CONSTRUCTIVE
        assert by_id["c4"].topics == ["pacing"]
        assert by_id["c4"].intent == "suggestion"
        assert by_id["c6"].topics == ["audio"]

    @pytest.mark.asyncio
    async def test_heuristic_fields_are_derived(self, app_config, comments):
        service = CommentAnalysisService(config=app_config)

        results = await service.analyze(comments)
        by_id = {r.comment_id: r for r in results}

        assert by_id["c2"].toxicity == 0.7
        assert by_id["c2"].intent == "promotion"
        assert by_id["c3"].intent == "critique"
        assert by_id["c1"].intent == "appreciation"
        assert by_id["c1"].topics == ["general"]

    @pytest.mark.asyncio
    async def test_empty_service_intent_is_derived(self, app_config):
        service = CommentAnalysisService(
            classifier=FakeClassifier(intent=""), config=app_config
        )

        results = await service.analyze([{"id": "x", "text": uncertain_text(1)}])

        assert results[0].intent == "suggestion"

    @pytest.mark.asyncio
    async def test_missing_id_in_response_falls_back(self, app_config, comments):
        """Test per-item failure inside a successful batch"""
        service = CommentAnalysisService(
            classifier=FakeClassifier(omit_ids={"c5"}), config=app_config
        )

        results = await service.analyze(comments)
        by_id = {r.comment_id: r for r in results}

        expected = fallback_classify(uncertain_text(5))
        assert by_id["c4"].category == Category.CONSTRUCTIVE
        assert by_id["c5"].category == expected.category
        assert by_id["c5"].sentiment == expected.sentiment

    @pytest.mark.asyncio
    async def test_total_outage_uses_fallback(self, app_config, comments):
        """Test fallback guarantee"""
        classifier = Mock()
        classifier.classify_batch = AsyncMock(side_effect=LLMServiceError("unreachable"))
        service = CommentAnalysisService(classifier=classifier, config=app_config)

        results = await service.analyze(comments)

        assert len(results) == len(comments)
        assert all(r is not None for r in results)
        assert classifier.classify_batch.await_count == 1
        assert results[3].category == fallback_classify(uncertain_text(4)).category

    @pytest.mark.asyncio
    async def test_without_classifier(self, app_config, comments):
        service = CommentAnalysisService(config=app_config)

        results = await service.analyze(comments)

        assert len(results) == len(comments)

    @pytest.mark.asyncio
    async def test_harmful_categories_toxicity_floor(self, app_config):
        service = CommentAnalysisService(config=app_config)

        results = await service.analyze(
            [
                {"id": "a", "text": "terrible, so disappointed"},
                {"id": "b", "text": "free prize, click now"},
                {"id": "c", "text": "meh"},
            ]
        )

        for r in results:
            if r.category in (Category.SPAM, Category.NEGATIVE):
                assert r.toxicity >= 0.4

    @pytest.mark.asyncio
    async def test_out_of_range_service_sentiment_keeps_toxicity_bounded(self, app_config):
        """Test toxicity stays within [0, 1] whatever the service returns"""
        classifier = Mock()
        classifier.classify_batch = AsyncMock(
            side_effect=lambda items: [
                ServiceClassification(
                    id=item.id,
                    category=category,
                    sentiment=SentimentScore(0.0, 0.0, 3.5),
                    topics=["general"],
                    intent="critique",
                )
                for item, category in zip(items, [Category.NEGATIVE, Category.NEUTRAL])
            ]
        )
        service = CommentAnalysisService(classifier=classifier, config=app_config)

        results = await service.analyze(
            [{"id": "n", "text": uncertain_text(1)}, {"id": "m", "text": uncertain_text(2)}]
        )
        by_id = {r.comment_id: r for r in results}

        assert by_id["n"].category == Category.NEGATIVE
        assert by_id["n"].toxicity == 1.0
        assert by_id["m"].toxicity == pytest.approx(0.6)


# ============================================================================
# Caching
# ============================================================================


class TestCaching:
    """Test idempotence and invalidation under caching"""

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self, app_config, comments):
        """Test no batch calls on a repeated request"""
        store = InMemorySentimentStore()
        classifier = FakeClassifier()
        service = CommentAnalysisService(
            classifier=classifier, cache_store=store, config=app_config
        )

        first = await service.analyze(comments, SCOPE)
        calls_after_first = len(classifier.batches)
        second = await service.analyze(comments, SCOPE)

        assert calls_after_first == 1
        assert len(classifier.batches) == calls_after_first
        assert [(r.category, r.sentiment) for r in first] == [
            (r.category, r.sentiment) for r in second
        ]
        assert len(store) == len(comments)

    @pytest.mark.asyncio
    async def test_edited_comment_is_recomputed(self, app_config, comments):
        """Test stale cache entries are not reused"""
        store = InMemorySentimentStore()
        classifier = FakeClassifier()
        service = CommentAnalysisService(
            classifier=classifier, cache_store=store, config=app_config
        )
        await service.analyze(comments, SCOPE)

        edited = [dict(c) for c in comments]
        edited[4]["text"] = uncertain_text(55)
        edited[2]["text"] = "I love it now"
        results = await service.analyze(edited, SCOPE)

        assert classifier.batches[-1] == ["c5"]
        assert results[2].category == Category.POSITIVE

    @pytest.mark.asyncio
    async def test_cache_requires_owner_and_video(self, app_config, comments):
        store = Mock()
        store.fetch = AsyncMock(return_value=[])
        store.upsert = AsyncMock(return_value=0)
        service = CommentAnalysisService(cache_store=store, config=app_config)

        await service.analyze(comments, {"ownerId": "user-1"})

        store.fetch.assert_not_awaited()
        store.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cache_disabled_by_config(self, app_config, comments):
        app_config.cache.enabled = False
        store = Mock()
        store.fetch = AsyncMock(return_value=[])
        service = CommentAnalysisService(cache_store=store, config=app_config)

        await service.analyze(comments, SCOPE)

        store.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_broken_store_does_not_fail_request(self, app_config, comments):
        store = Mock()
        store.fetch = AsyncMock(side_effect=ConnectionError("down"))
        store.upsert = AsyncMock(side_effect=ConnectionError("down"))
        service = CommentAnalysisService(cache_store=store, config=app_config)

        results = await service.analyze(comments, SCOPE)

        assert len(results) == len(comments)
        store.upsert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_writes_complete_before_return(self, app_config, comments):
        store = InMemorySentimentStore()
        service = CommentAnalysisService(cache_store=store, config=app_config)

        await service.analyze(comments, SCOPE)

        fetched = await store.fetch("user-1", "video-1", [c["id"] for c in comments])
        assert len(fetched) == len(comments)


# ============================================================================
# Concurrency
# ============================================================================


class TestTierConcurrency:
    """Test tier-dependent batch ceilings"""

    @pytest.mark.asyncio
    async def test_free_tier_ceiling(self, app_config):
        classifier = FakeClassifier(delay=0.02)
        service = CommentAnalysisService(classifier=classifier, config=app_config)
        items = [{"id": f"u{i}", "text": uncertain_text(i)} for i in range(8)]

        await service.analyze(items, {"batchSize": 1, "tier": "free"})

        assert len(classifier.batches) == 8
        assert classifier.max_active == app_config.llm.max_parallel

    @pytest.mark.asyncio
    async def test_pro_tier_doubles_ceiling(self, app_config):
        classifier = FakeClassifier(delay=0.02)
        service = CommentAnalysisService(classifier=classifier, config=app_config)
        items = [{"id": f"u{i}", "text": uncertain_text(i)} for i in range(8)]

        await service.analyze(items, {"batchSize": 1, "tier": "pro"})

        assert classifier.max_active == app_config.llm.max_parallel * 2

    @pytest.mark.asyncio
    async def test_batch_size_from_config(self, app_config):
        classifier = FakeClassifier()
        service = CommentAnalysisService(classifier=classifier, config=app_config)
        items = [{"id": f"u{i}", "text": uncertain_text(i)} for i in range(5)]

        await service.analyze(items)

        assert sorted(len(b) for b in classifier.batches) == [1, 2, 2]


# ============================================================================
# Moderation
# ============================================================================


class TestModeration:
    """Test optional moderation overrides"""

    @pytest.mark.asyncio
    async def test_flagged_comment_becomes_negative(self, app_config):
        app_config.pipeline.moderation_enabled = True
        moderator = Mock()
        moderator.moderate = AsyncMock(
            return_value=ModerationResult(flagged=True, category="harassment")
        )
        service = CommentAnalysisService(moderator=moderator, config=app_config)

        results = await service.analyze([{"id": "a", "text": "I love this video so much"}])

        assert results[0].category == Category.NEGATIVE
        assert results[0].toxicity == 0.6
        assert results[0].intent == "critique"

    @pytest.mark.asyncio
    async def test_moderation_disabled_by_default(self, app_config):
        moderator = Mock()
        moderator.moderate = AsyncMock(return_value=ModerationResult(flagged=True, category="hate"))
        service = CommentAnalysisService(moderator=moderator, config=app_config)

        results = await service.analyze([{"id": "a", "text": "I love this video so much"}])

        moderator.moderate.assert_not_awaited()
        assert results[0].category == Category.POSITIVE

    @pytest.mark.asyncio
    async def test_moderation_errors_are_ignored(self, app_config):
        app_config.pipeline.moderation_enabled = True
        moderator = Mock()
        moderator.moderate = AsyncMock(side_effect=RuntimeError("down"))
        service = CommentAnalysisService(moderator=moderator, config=app_config)

        results = await service.analyze([{"id": "a", "text": "I love this video so much"}])

        assert results[0].category == Category.POSITIVE


# ============================================================================
# Input Validation
# ============================================================================


class TestInputValidation:
    """Test top-level validation"""

    @pytest.mark.asyncio
    async def test_none_input(self, app_config):
        service = CommentAnalysisService(config=app_config)

        with pytest.raises(ValidationError):
            await service.analyze(None)

    @pytest.mark.asyncio
    async def test_non_list_input(self, app_config):
        service = CommentAnalysisService(config=app_config)

        with pytest.raises(ValidationError):
            await service.analyze("not a list")

    @pytest.mark.asyncio
    async def test_missing_id(self, app_config):
        service = CommentAnalysisService(config=app_config)

        with pytest.raises(ValidationError) as exc_info:
            await service.analyze([{"text": "hello"}])

        assert exc_info.value.field == "comments[0]"

    @pytest.mark.asyncio
    async def test_invalid_batch_size(self, app_config):
        service = CommentAnalysisService(config=app_config)

        with pytest.raises(ValidationError):
            await service.analyze([{"id": "a", "text": "x"}], {"batchSize": 0})

    @pytest.mark.asyncio
    async def test_missing_text_is_empty(self, app_config):
        service = CommentAnalysisService(config=app_config)

        results = await service.analyze([{"id": "a"}, {"id": "b", "text": None}])

        assert [r.category for r in results] == [Category.NEUTRAL, Category.NEUTRAL]

    @pytest.mark.asyncio
    async def test_empty_list(self, app_config):
        service = CommentAnalysisService(config=app_config)

        assert await service.analyze([]) == []

    @pytest.mark.asyncio
    async def test_accepts_comment_models(self, app_config):
        results = await analyze(
            [Comment(id="a", text="worst video ever")], config=app_config
        )

        assert results[0].category == Category.NEGATIVE
        assert results[0].to_dict()["commentId"] == "a"
