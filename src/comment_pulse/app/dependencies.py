# src/comment_pulse/app/dependencies.py
"""
Service Dependency Wiring
Factories that build clients, stores and services from configuration
"""

import logging
from functools import lru_cache
from typing import Optional

from comment_pulse.app.config import get_config
from comment_pulse.app.database import DatabaseManager
from comment_pulse.app.shared_cache import InMemorySentimentStore
from comment_pulse.domain.interfaces import SentimentCacheStore
from comment_pulse.infrastructure.clients.openai_client import (
    OpenAIClient,
    create_openai_client,
)
from comment_pulse.infrastructure.repositories import SqlSentimentStore
from comment_pulse.services.analysis_service import CommentAnalysisService
from comment_pulse.services.reply_service import ReplyService
from comment_pulse.services.tone_service import ToneService

logger = logging.getLogger(__name__)


# ============================================================================
# Singletons
# ============================================================================


@lru_cache()
def get_openai_client() -> OpenAIClient:
    """
    Get or create OpenAI client (Singleton)

    Returns:
        OpenAIClient instance
    """
    return create_openai_client()


@lru_cache()
def get_db_manager() -> DatabaseManager:
    """Get or create the database manager (Singleton)"""
    return DatabaseManager()


@lru_cache()
def get_memory_store() -> InMemorySentimentStore:
    return InMemorySentimentStore()


def get_cache_store() -> Optional[SentimentCacheStore]:
    """
    Cache backend selected by CACHE_BACKEND

    Returns:
        Store instance, or None when caching is disabled
    """
    cache_config = get_config().cache
    if not cache_config.enabled:
        return None
    if cache_config.backend == "memory":
        return get_memory_store()
    return SqlSentimentStore(get_db_manager())


# ============================================================================
# Service Factories
# ============================================================================


def get_analysis_service() -> CommentAnalysisService:
    """Analysis service wired to the configured client, cache and moderation"""
    config = get_config()
    client = get_openai_client()
    moderator = client if config.pipeline.moderation_enabled else None
    return CommentAnalysisService(
        classifier=client,
        cache_store=get_cache_store(),
        moderator=moderator,
        config=config,
    )


def get_reply_service() -> ReplyService:
    return ReplyService(chat=get_openai_client(), config=get_config())


def get_tone_service() -> ToneService:
    """Tone analysis backed by the configured chat model"""
    return ToneService(chat=get_openai_client(), config=get_config())


def clear_dependency_cache() -> None:
    """Drop cached singletons (tests, config reloads)"""
    get_openai_client.cache_clear()
    get_db_manager.cache_clear()
    get_memory_store.cache_clear()
    logger.info("🧹 Dependency cache cleared")
