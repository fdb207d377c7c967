# src/comment_pulse/domain/interfaces.py
"""
Domain-facing store and client interfaces (Protocols).

Concrete stores and clients satisfy these via duck typing; there is no
inheritance requirement. Tests substitute ``AsyncMock`` objects freely.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from comment_pulse.domain.models import (
    CacheEntry,
    ClassificationItem,
    ModerationResult,
    ServiceClassification,
)


@runtime_checkable
class SentimentCacheStore(Protocol):
    """Key-value store for per-comment results, scoped by (owner, video)."""

    async def fetch(
        self, owner_id: str, video_id: str, comment_ids: Sequence[str]
    ) -> List[CacheEntry]:
        """Return stored entries for the given ids (no hash filtering)."""
        ...

    async def upsert(
        self, owner_id: str, video_id: str, entries: Sequence[CacheEntry]
    ) -> int:
        """Insert or overwrite entries, returning the number written."""
        ...

    async def delete(self, owner_id: str, video_id: str) -> int:
        """Remove every entry for a video (forced re-analysis)."""
        ...


@runtime_checkable
class ClassificationService(Protocol):
    """External batch classifier. Missing ids in the response are failures."""

    async def classify_batch(
        self, items: Sequence[ClassificationItem]
    ) -> List[ServiceClassification]: ...


@runtime_checkable
class ModerationService(Protocol):
    """Optional moderation signal, never a source of truth for category."""

    async def moderate(self, text: str) -> ModerationResult: ...


@runtime_checkable
class ChatService(Protocol):
    """Single-turn chat completion used for reply drafting."""

    async def chat_reply(self, system: str, user: str) -> Optional[str]: ...


@runtime_checkable
class StructuredChatService(Protocol):
    """JSON-mode chat completion. Raises on failure instead of degrading."""

    async def chat_json(self, system: str, user: str) -> Dict[str, Any]: ...
