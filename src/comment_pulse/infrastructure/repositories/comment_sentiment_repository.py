# src/comment_pulse/infrastructure/repositories/comment_sentiment_repository.py
"""
Comment Sentiment Repository
Persistence for cached per-comment analyses, plus the SQL-backed cache store
"""

from typing import List, Sequence, Tuple
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .base import BaseRepository
from comment_pulse.app.database import DatabaseManager
from comment_pulse.app.models import CommentSentiment
from comment_pulse.domain.models import CacheEntry
from comment_pulse.services.exceptions import CacheStoreError

logger = logging.getLogger(__name__)

# Keeps IN (...) clauses under driver parameter limits
LOOKUP_CHUNK_SIZE = 500


class CommentSentimentRepository(BaseRepository[CommentSentiment]):
    """
    Repository for CommentSentiment rows
    """

    def __init__(self, session: AsyncSession):
        """Initialize comment sentiment repository"""
        super().__init__(session, CommentSentiment)

    async def get_for_comments(
        self, owner_id: str, video_id: str, comment_ids: Sequence[str]
    ) -> List[CommentSentiment]:
        """
        Get cached rows for specific comments of one video

        Args:
            owner_id: Requesting user
            video_id: Video ID
            comment_ids: Comment IDs to look up

        Returns:
            Rows that exist (any order)
        """
        ids = list(dict.fromkeys(comment_ids))
        rows: List[CommentSentiment] = []

        for start in range(0, len(ids), LOOKUP_CHUNK_SIZE):
            chunk = ids[start : start + LOOKUP_CHUNK_SIZE]
            query = select(CommentSentiment).where(
                CommentSentiment.owner_id == owner_id,
                CommentSentiment.video_id == video_id,
                CommentSentiment.comment_id.in_(chunk),
            )
            result = await self.session.execute(query)
            rows.extend(result.scalars().all())

        return rows

    async def upsert_many(self, entries: Sequence[CacheEntry]) -> Tuple[int, int]:
        """
        Insert or overwrite rows keyed by (owner, video, comment)

        One merged transaction is tried first. If it fails, each row is
        retried in its own transaction so one bad row cannot undo the rest.

        Args:
            entries: Cache entries to persist

        Returns:
            (rows written, rows failed)
        """
        if not entries:
            return 0, 0

        try:
            for entry in entries:
                await self.session.merge(CommentSentiment.from_entry(entry))
            await self.session.commit()
            return len(entries), 0
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(
                f"⚠️ Batch upsert of {len(entries)} sentiments failed, "
                f"retrying row by row: {e}"
            )

        written = failed = 0
        for entry in entries:
            try:
                await self.merge(CommentSentiment.from_entry(entry))
                written += 1
            except SQLAlchemyError as e:
                await self.session.rollback()
                failed += 1
                logger.warning(f"⚠️ Failed to store sentiment for {entry.comment_id}: {e}")

        return written, failed

    async def delete_for_video(self, owner_id: str, video_id: str) -> int:
        """Delete every cached row of one video (forced re-analysis)"""
        return await self.delete_by(owner_id=owner_id, video_id=video_id)


class SqlSentimentStore:
    """
    Sentiment cache store backed by the comment_sentiments table

    Each operation opens its own session. Database errors surface as
    CacheStoreError.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def fetch(
        self, owner_id: str, video_id: str, comment_ids: Sequence[str]
    ) -> List[CacheEntry]:
        try:
            async with self.db_manager.session() as session:
                rows = await CommentSentimentRepository(session).get_for_comments(
                    owner_id, video_id, comment_ids
                )
                return [row.to_entry() for row in rows]
        except SQLAlchemyError as e:
            raise CacheStoreError("fetch", str(e)) from e

    async def upsert(
        self, owner_id: str, video_id: str, entries: Sequence[CacheEntry]
    ) -> int:
        try:
            async with self.db_manager.session() as session:
                written, failed = await CommentSentimentRepository(session).upsert_many(
                    entries
                )
        except SQLAlchemyError as e:
            raise CacheStoreError("upsert", str(e)) from e

        if failed:
            logger.warning(
                f"⚠️ {failed}/{len(entries)} sentiment rows not stored for video {video_id}"
            )
        return written

    async def delete(self, owner_id: str, video_id: str) -> int:
        try:
            async with self.db_manager.session() as session:
                return await CommentSentimentRepository(session).delete_for_video(
                    owner_id, video_id
                )
        except SQLAlchemyError as e:
            raise CacheStoreError("delete", str(e)) from e
