# src/comment_pulse/services/analysis_service.py
"""
Comment Analysis Service
Tiered classification: cache -> heuristics -> external batches -> fallback
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from comment_pulse.app.config import Config
from comment_pulse.domain.interfaces import (
    ClassificationService,
    ModerationService,
    SentimentCacheStore,
)
from comment_pulse.domain.models import (
    AnalyzeOptions,
    Analysis,
    Category,
    ClassificationItem,
    Comment,
    ModerationResult,
    SentimentScore,
)
from comment_pulse.infrastructure.clients.rate_limiter import (
    ConcurrencyLimiter,
    limiter_for_tier,
)
from comment_pulse.services.base_service import BaseService
from comment_pulse.services.batch_dispatcher import BatchDispatcher
from comment_pulse.services.classification import (
    apply_moderation_overrides,
    calculate_toxicity,
    determine_intent,
    extract_topics,
    fallback_classify,
    heuristic_classify,
)
from comment_pulse.services.exceptions import ValidationError
from comment_pulse.services.sentiment_cache import SentimentCacheGateway


# ============================================================================
# Request Boundary
# ============================================================================


def coerce_comments(comments: Any) -> List[Comment]:
    """Validate the top-level comment list; per-item errors name the index"""
    if comments is None:
        raise ValidationError("comments", "is required")
    if not isinstance(comments, (list, tuple)):
        raise ValidationError("comments", "must be a list of comments")

    parsed: List[Comment] = []
    for index, raw in enumerate(comments):
        if isinstance(raw, Comment):
            parsed.append(raw)
            continue
        if not isinstance(raw, dict):
            raise ValidationError(f"comments[{index}]", "must be a mapping")
        try:
            parsed.append(Comment.model_validate(raw))
        except PydanticValidationError as e:
            raise ValidationError(f"comments[{index}]", str(e)) from e
    return parsed


class CommentAnalysisService(BaseService):
    """
    Classifies comments with the cheapest tier that can decide them

    Handles:
    - Cache reuse scoped by (owner, video), invalidated by text hash
    - Rule-based classification with a refinement pass
    - Batched external classification of uncertain comments
    - Keyword fallback so every comment gets an analysis
    - Best-effort write-back of fresh results
    """

    def __init__(
        self,
        classifier: Optional[ClassificationService] = None,
        cache_store: Optional[SentimentCacheStore] = None,
        moderator: Optional[ModerationService] = None,
        config: Optional[Config] = None,
    ):
        """
        Initialize service

        Args:
            classifier: External batch classifier (None routes uncertain
                comments straight to the fallback)
            cache_store: Sentiment cache backend (None disables caching)
            moderator: Optional moderation signal
            config: App configuration (global config if not provided)
        """
        super().__init__(config=config)
        self.classifier = classifier
        self.moderator = moderator
        cache_enabled = self.config.cache.enabled and cache_store is not None
        self.cache = SentimentCacheGateway(cache_store if cache_enabled else None)

    def get_service_name(self) -> str:
        return "analysis"

    # ========================================================================
    # Request Boundary
    # ========================================================================

    def _coerce_options(self, options: Any) -> AnalyzeOptions:
        if options is None:
            return AnalyzeOptions()
        if isinstance(options, AnalyzeOptions):
            return options
        if not isinstance(options, dict):
            raise ValidationError("options", "must be a mapping")
        try:
            return AnalyzeOptions.model_validate(options)
        except PydanticValidationError as e:
            raise ValidationError("options", str(e)) from e

    # ========================================================================
    # Pipeline
    # ========================================================================

    async def analyze(
        self, comments: Sequence[Any], options: Any = None
    ) -> List[Analysis]:
        """
        Analyze comments

        Args:
            comments: Comment models or mappings with at least an ``id``
            options: AnalyzeOptions or mapping (ownerId, videoId, tier, batchSize)

        Returns:
            One Analysis per input comment, in input order

        Raises:
            ValidationError: Top-level input is unusable
        """
        items = coerce_comments(comments)
        opts = self._coerce_options(options)
        if not items:
            return []

        pipeline = self.config.pipeline
        batch_size = opts.batch_size or pipeline.default_batch_size
        limiter = limiter_for_tier(
            opts.tier, self.config.llm.max_parallel, pipeline.pro_parallel_multiplier
        )
        self.log_info(
            f"Analyzing {len(items)} comments (tier={opts.tier.value}, batch_size={batch_size})"
        )

        resolved: List[Optional[Analysis]] = [None] * len(items)

        # Tier 1: cache
        use_cache = opts.cache_scoped and self.cache.enabled
        if use_cache:
            hits = await self.cache.lookup(opts.owner_id, opts.video_id, items)
            for index, comment in enumerate(items):
                entry = hits.get(comment.id)
                if entry is not None:
                    resolved[index] = entry.to_analysis()
        fresh = [i for i, a in enumerate(resolved) if a is None]

        # Tier 2: heuristics
        uncertain: List[int] = []
        for index in fresh:
            comment = items[index]
            result = heuristic_classify(comment.text)
            if result is None:
                uncertain.append(index)
            else:
                resolved[index] = self._build_analysis(
                    comment, result.category, result.sentiment
                )
        self.log_info(
            f"Heuristics resolved {len(fresh) - len(uncertain)}, uncertain {len(uncertain)}"
        )

        # Tier 3: external service
        if uncertain:
            dispatcher = BatchDispatcher(
                self.classifier,
                limiter,
                batch_size=batch_size,
                jitter_base_ms=pipeline.jitter_base_ms,
                jitter_variance_ms=pipeline.jitter_variance_ms,
                batch_timeout=pipeline.batch_timeout_seconds,
            )
            service_results = await dispatcher.dispatch(
                [ClassificationItem(items[i].id, items[i].text) for i in uncertain]
            )

            # Tier 4: fallback
            fallback_count = 0
            for index in uncertain:
                comment = items[index]
                service = service_results.get(comment.id)
                if service is not None:
                    resolved[index] = self._build_analysis(
                        comment,
                        service.category,
                        service.sentiment,
                        topics=service.topics,
                        intent=service.intent,
                    )
                else:
                    result = fallback_classify(comment.text)
                    resolved[index] = self._build_analysis(
                        comment, result.category, result.sentiment
                    )
                    fallback_count += 1
            if fallback_count:
                self.log_info(f"Fallback classified {fallback_count} comments")

        if self.moderator is not None and pipeline.moderation_enabled:
            await self._apply_moderation(items, resolved, fresh, limiter)

        analyses: List[Analysis] = [a for a in resolved if a is not None]

        if use_cache and fresh:
            await self.cache.store_results(
                opts.owner_id,
                opts.video_id,
                [(items[i], resolved[i]) for i in fresh],
            )

        return analyses

    def _build_analysis(
        self,
        comment: Comment,
        category: Category,
        sentiment: SentimentScore,
        topics: Optional[List[str]] = None,
        intent: Optional[str] = None,
    ) -> Analysis:
        toxicity = calculate_toxicity(category, sentiment)
        final_category, toxicity = apply_moderation_overrides(
            comment.text, category, toxicity
        )
        if final_category != category or not intent:
            intent = determine_intent(final_category)

        return Analysis(
            comment_id=comment.id,
            sentiment=sentiment,
            topics=list(topics) if topics else extract_topics(comment.text),
            intent=intent,
            toxicity=toxicity,
            category=final_category,
        )

    async def _apply_moderation(
        self,
        items: List[Comment],
        resolved: List[Optional[Analysis]],
        fresh: List[int],
        limiter: ConcurrencyLimiter,
    ) -> None:
        targets = [i for i in fresh if items[i].text]

        async def moderate(index: int) -> Optional[ModerationResult]:
            try:
                async with limiter:
                    return await self.moderator.moderate(items[index].text)
            except Exception as e:
                self.log_warning(f"Moderation failed for {items[index].id}: {e}")
                return None

        verdicts = await asyncio.gather(*(moderate(i) for i in targets))

        flagged = 0
        for index, verdict in zip(targets, verdicts):
            current = resolved[index]
            if verdict is None or not verdict.flagged or current is None:
                continue
            category, toxicity = apply_moderation_overrides(
                items[index].text, current.category, current.toxicity, verdict
            )
            if category != current.category:
                current.intent = determine_intent(category)
            current.category = category
            current.toxicity = toxicity
            flagged += 1

        if flagged:
            self.log_info(f"Moderation flagged {flagged}/{len(targets)} comments")


# ============================================================================
# Convenience Functions
# ============================================================================


async def analyze(
    comments: Sequence[Any],
    options: Any = None,
    *,
    classifier: Optional[ClassificationService] = None,
    cache_store: Optional[SentimentCacheStore] = None,
    moderator: Optional[ModerationService] = None,
    config: Optional[Config] = None,
) -> List[Analysis]:
    """
    Analyze comments with explicitly supplied collaborators

    Without a classifier, uncertain comments go straight to the fallback;
    without a cache store, nothing is reused or written.
    """
    service = CommentAnalysisService(
        classifier=classifier,
        cache_store=cache_store,
        moderator=moderator,
        config=config,
    )
    return await service.analyze(comments, options)


def index_by_comment(analyses: Iterable[Analysis]) -> Dict[str, Analysis]:
    """Map comment_id -> analysis (later duplicates win)"""
    return {a.comment_id: a for a in analyses}
