# src/comment_pulse/app/database.py
"""
Database Configuration and Session Management
Uses SQLAlchemy with async support
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from comment_pulse.app.config import DatabaseConfig, get_config
from comment_pulse.app.models import Base

logger = logging.getLogger(__name__)


def _engine_kwargs(db_config: DatabaseConfig) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"echo": db_config.echo}
    # SQLite drivers use a static/singleton pool without sizing options
    if not db_config.url.startswith("sqlite"):
        kwargs["pool_size"] = db_config.pool_size
        kwargs["max_overflow"] = db_config.max_overflow
    return kwargs


class DatabaseManager:
    """
    Owns the async engine and session factory

    Usage:
        async with db_manager.session() as session:
            repo = CommentSentimentRepository(session)
            ...
    """

    def __init__(
        self,
        db_config: Optional[DatabaseConfig] = None,
        engine: Optional[AsyncEngine] = None,
    ):
        """
        Initialize manager

        Args:
            db_config: Database settings (global config if not provided)
            engine: Pre-built engine (tests pass an in-memory engine)
        """
        self.db_config = db_config or get_config().database
        self.engine = engine or create_async_engine(
            self.db_config.url, **_engine_kwargs(self.db_config)
        )
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that is always closed on exit"""
        async with self.session_factory() as session:
            yield session

    async def init_db(self) -> None:
        """
        Initialize database tables
        Creates all tables defined by models
        """
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("✅ Database tables created successfully")
        except Exception as e:
            logger.error(f"❌ Failed to create database tables: {e}")
            raise

    async def drop_all_tables(self) -> None:
        """
        Drop all tables (use with caution!)
        Only use in development/testing
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("⚠️  All tables dropped")

    async def dispose(self) -> None:
        await self.engine.dispose()
