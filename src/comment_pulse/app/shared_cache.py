# src/comment_pulse/app/shared_cache.py
"""
In-process sentiment cache store
Keeps analyses in memory, keyed by (owner, video, comment)
"""

import asyncio
import logging
from typing import Dict, List, Sequence, Tuple

from comment_pulse.domain.models import CacheEntry

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str, str]


class InMemorySentimentStore:
    """
    Memory backend of the sentiment cache contract

    Last write wins. Suitable for single-process deployments and tests.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._lock = asyncio.Lock()

    async def fetch(
        self, owner_id: str, video_id: str, comment_ids: Sequence[str]
    ) -> List[CacheEntry]:
        async with self._lock:
            return [
                self._entries[key]
                for key in ((owner_id, video_id, cid) for cid in dict.fromkeys(comment_ids))
                if key in self._entries
            ]

    async def upsert(
        self, owner_id: str, video_id: str, entries: Sequence[CacheEntry]
    ) -> int:
        async with self._lock:
            for entry in entries:
                self._entries[(owner_id, video_id, entry.comment_id)] = entry
        logger.debug(f"🗄️ Stored {len(entries)} entries for {owner_id}/{video_id}")
        return len(entries)

    async def delete(self, owner_id: str, video_id: str) -> int:
        async with self._lock:
            keys = [k for k in self._entries if k[0] == owner_id and k[1] == video_id]
            for key in keys:
                del self._entries[key]
        return len(keys)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
