# src/comment_pulse/infrastructure/repositories/base.py
"""
Base Repository Pattern
Provides generic filtered query, merge and delete operations
"""

from typing import Any, Generic, Type, TypeVar
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete
import logging

logger = logging.getLogger(__name__)

# Generic type for models
ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """
    Repository with generic operations keyed by column filters

    Models here may use composite primary keys, so every operation takes
    column=value filters instead of a single id.

    Usage:
        class CommentSentimentRepository(BaseRepository[CommentSentiment]):
            def __init__(self, session: AsyncSession):
                super().__init__(session, CommentSentiment)
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """
        Initialize repository

        Args:
            session: Database session
            model: SQLAlchemy model class
        """
        self.session = session
        self.model = model

    def _apply_filters(self, query, filters: dict):
        for key, value in filters.items():
            if hasattr(self.model, key):
                column = getattr(self.model, key)
                query = query.where(column.is_(None) if value is None else column == value)
        return query

    # ========================================================================
    # WRITE Operations
    # ========================================================================

    async def merge(self, instance: ModelType) -> ModelType:
        """
        Insert or overwrite one entity by primary key and commit

        Args:
            instance: Transient model instance

        Returns:
            Persistent merged instance
        """
        try:
            merged = await self.session.merge(instance)
            await self.session.commit()
            return merged
        except Exception as e:
            await self.session.rollback()
            logger.error(f"❌ Failed to merge {self.model.__name__}: {e}")
            raise

    # ========================================================================
    # DELETE Operations
    # ========================================================================

    async def delete_by(self, **filters: Any) -> int:
        """
        Delete entities matching filters

        Returns:
            Number of deleted records
        """
        if not filters:
            raise ValueError("delete_by requires at least one filter")
        try:
            result = await self.session.execute(
                self._apply_filters(delete(self.model), filters)
            )
            await self.session.commit()
            deleted_count = int(result.rowcount or 0)
            logger.info(f"✅ Deleted {deleted_count} {self.model.__name__} records")
            return deleted_count
        except Exception as e:
            await self.session.rollback()
            logger.error(f"❌ Failed to delete {self.model.__name__}: {e}")
            raise
