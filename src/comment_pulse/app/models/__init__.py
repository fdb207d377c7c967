# src/comment_pulse/app/models/__init__.py
"""
ORM models
"""
from .comment_sentiment import Base, CommentSentiment

__all__ = ["Base", "CommentSentiment"]
