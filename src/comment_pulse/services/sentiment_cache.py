# src/comment_pulse/services/sentiment_cache.py
"""
Result Cache Gateway
Reuses previous analyses when the comment text has not changed.
"""

import hashlib
import logging
from typing import Dict, Optional, Sequence, Tuple

from comment_pulse.domain.interfaces import SentimentCacheStore
from comment_pulse.domain.models import Analysis, CacheEntry, Comment

logger = logging.getLogger(__name__)


def generate_text_hash(text: str) -> str:
    """sha256 hex digest of trimmed, lowercased text"""
    normalized = (text or "").strip().lower()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def _cacheable(comment: Comment) -> bool:
    return bool(comment.id) and bool(comment.text)


class SentimentCacheGateway:
    """
    Content-hash filtered view over a SentimentCacheStore

    Neither operation raises: store failures are logged and treated as an
    empty cache (lookup) or a skipped write (store).
    """

    def __init__(self, store: Optional[SentimentCacheStore]):
        self.store = store

    @property
    def enabled(self) -> bool:
        return self.store is not None

    async def lookup(
        self, owner_id: str, video_id: str, comments: Sequence[Comment]
    ) -> Dict[str, CacheEntry]:
        """
        Fetch cached entries still valid for the given comments

        Args:
            owner_id: Requesting user
            video_id: Video the comments belong to
            comments: Comments of the current request

        Returns:
            Map comment_id -> entry, only where the stored hash matches the
            hash of the current text
        """
        eligible = [c for c in comments if _cacheable(c)]
        if self.store is None or not eligible:
            return {}

        try:
            entries = await self.store.fetch(owner_id, video_id, [c.id for c in eligible])
        except Exception as e:
            logger.warning(f"⚠️ Cache lookup failed for video {video_id}: {e}")
            return {}

        current_hashes = {c.id: generate_text_hash(c.text) for c in eligible}
        hits: Dict[str, CacheEntry] = {}
        stale = 0
        for entry in entries:
            expected = current_hashes.get(entry.comment_id)
            if expected is None:
                continue
            if entry.text_hash == expected:
                hits[entry.comment_id] = entry
            else:
                stale += 1

        logger.info(
            f"🗄️ Cache hits: {len(hits)}/{len(eligible)}"
            + (f" ({stale} stale)" if stale else "")
        )
        return hits

    async def store_results(
        self,
        owner_id: str,
        video_id: str,
        results: Sequence[Tuple[Comment, Analysis]],
    ) -> int:
        """
        Upsert freshly computed analyses

        Args:
            owner_id: Requesting user
            video_id: Video the comments belong to
            results: (comment, analysis) pairs computed in this request

        Returns:
            Number of rows written (0 when the store failed)
        """
        entries = [
            CacheEntry(
                owner_id=owner_id,
                video_id=video_id,
                comment_id=comment.id,
                text_hash=generate_text_hash(comment.text),
                sentiment=analysis.sentiment,
                category=analysis.category,
                topics=list(analysis.topics),
                intent=analysis.intent,
                toxicity=analysis.toxicity,
            )
            for comment, analysis in results
            if _cacheable(comment)
        ]
        if self.store is None or not entries:
            return 0

        try:
            written = await self.store.upsert(owner_id, video_id, entries)
        except Exception as e:
            logger.warning(
                f"⚠️ Cache store failed for video {video_id} ({len(entries)} rows): {e}"
            )
            return 0

        logger.info(f"🗄️ Cached {written}/{len(entries)} analyses for video {video_id}")
        return written
