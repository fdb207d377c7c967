# src/comment_pulse/infrastructure/repositories/__init__.py
"""
Repository Package
"""

from .base import BaseRepository
from .comment_sentiment_repository import (
    CommentSentimentRepository,
    SqlSentimentStore,
)

__all__ = [
    "BaseRepository",
    "CommentSentimentRepository",
    "SqlSentimentStore",
]
