# src/comment_pulse/services/batch_dispatcher.py
"""
Batch Dispatcher
Sends uncertain comments to the external classifier in concurrent batches.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from comment_pulse.domain.interfaces import ClassificationService
from comment_pulse.domain.models import ClassificationItem, ServiceClassification
from comment_pulse.infrastructure.clients.rate_limiter import ConcurrencyLimiter, jitter_delay

logger = logging.getLogger(__name__)


class BatchDispatcher:
    """
    Fan-out of fixed-size batches under a concurrency ceiling

    A failed or timed-out batch contributes no results; its items are left
    for the fallback classifier and sibling batches are unaffected.
    """

    def __init__(
        self,
        classifier: Optional[ClassificationService],
        limiter: ConcurrencyLimiter,
        batch_size: int = 50,
        jitter_base_ms: int = 30,
        jitter_variance_ms: int = 70,
        batch_timeout: Optional[float] = 30.0,
    ):
        """
        Initialize dispatcher

        Args:
            classifier: External batch classifier (None disables dispatch)
            limiter: Ceiling on simultaneously in-flight batches
            batch_size: Items per batch call
            jitter_base_ms: Minimum pause before each batch after the first
            jitter_variance_ms: Random extra pause on top of the base
            batch_timeout: Seconds before a batch call counts as failed
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.classifier = classifier
        self.limiter = limiter
        self.batch_size = batch_size
        self.jitter_base_ms = jitter_base_ms
        self.jitter_variance_ms = jitter_variance_ms
        self.batch_timeout = batch_timeout

    def partition(self, items: Sequence[ClassificationItem]) -> List[List[ClassificationItem]]:
        return [
            list(items[start : start + self.batch_size])
            for start in range(0, len(items), self.batch_size)
        ]

    async def dispatch(
        self, items: Sequence[ClassificationItem]
    ) -> Dict[str, ServiceClassification]:
        """
        Classify items through the external service

        Args:
            items: Uncertain comments

        Returns:
            Map comment_id -> service result, for every id some batch resolved
        """
        if not items or self.classifier is None:
            return {}

        batches = self.partition(items)
        logger.info(
            f"📦 Dispatching {len(items)} items in {len(batches)} batches "
            f"(size={self.batch_size}, ceiling={self.limiter.max_in_flight})"
        )

        outcomes = await asyncio.gather(
            *(self._run_batch(index, batch) for index, batch in enumerate(batches))
        )

        requested = {item.id for item in items}
        resolved: Dict[str, ServiceClassification] = {}
        for results in outcomes:
            for result in results:
                if result.id in requested and result.id not in resolved:
                    resolved[result.id] = result

        logger.info(f"✅ Service resolved {len(resolved)}/{len(items)} items")
        return resolved

    async def _run_batch(
        self, index: int, batch: List[ClassificationItem]
    ) -> List[ServiceClassification]:
        if index > 0:
            await jitter_delay(self.jitter_base_ms, self.jitter_variance_ms)

        try:
            async with self.limiter:
                results = await asyncio.wait_for(
                    self.classifier.classify_batch(batch), timeout=self.batch_timeout
                )
            results = list(results or [])
            # A malformed response fails the whole batch, like any other error
            if not all(isinstance(r, ServiceClassification) for r in results):
                raise TypeError("classifier returned malformed results")
        except asyncio.TimeoutError:
            logger.warning(
                f"⚠️ Batch {index} ({len(batch)} items) timed out after {self.batch_timeout}s"
            )
            return []
        except Exception as e:
            logger.warning(f"⚠️ Batch {index} ({len(batch)} items) failed: {e}")
            return []

        return results
