# src/comment_pulse/services/__init__.py
"""
Services Package
Business logic layer for comment sentiment analysis
"""

from .base_service import BaseService
from .analysis_service import CommentAnalysisService, analyze, coerce_comments
from .reply_service import ReplyService
from .tone_service import ToneService, analyze_tone
from .comment_scoring import score_comment, score_comments
from .sentiment_cache import SentimentCacheGateway, generate_text_hash
from .batch_dispatcher import BatchDispatcher
from .summary import summarize
from .exceptions import (
    # Base
    ServiceError,

    # Validation Errors
    ValidationError,

    # External Service Errors
    ExternalServiceError,
    LLMServiceError,
    RateLimitExceededError,

    # Storage Errors
    CacheStoreError,

    # Configuration Errors
    ConfigurationError,

    # Utility Functions
    is_retryable_error,
    get_retry_delay,
)

__all__ = [
    # Base Classes
    "BaseService",

    # Services
    "CommentAnalysisService",
    "ReplyService",
    "ToneService",
    "SentimentCacheGateway",
    "BatchDispatcher",
    "analyze",
    "analyze_tone",
    "coerce_comments",
    "score_comment",
    "score_comments",
    "summarize",
    "generate_text_hash",

    # Exceptions
    "ServiceError",
    "ValidationError",
    "ExternalServiceError",
    "LLMServiceError",
    "RateLimitExceededError",
    "CacheStoreError",
    "ConfigurationError",

    # Utility Functions
    "is_retryable_error",
    "get_retry_delay",
]
