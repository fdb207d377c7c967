# src/comment_pulse/domain/__init__.py
"""
Domain layer: request/response models and collaborator interfaces.

    from comment_pulse.domain import Comment, Analysis, SentimentCacheStore
"""
from .interfaces import (
    SentimentCacheStore,
    ClassificationService,
    ModerationService,
    ChatService,
    StructuredChatService,
)
from .models import (
    Category,
    Tier,
    SentimentScore,
    Classification,
    Comment,
    AnalyzeOptions,
    Analysis,
    CacheEntry,
    TopicCount,
    SentimentSummary,
    ClassificationItem,
    ServiceClassification,
    ModerationResult,
    ToneProfile,
    GeneratedReply,
    ReplySettings,
    CommentScore,
)

__all__ = [
    "SentimentCacheStore",
    "ClassificationService",
    "ModerationService",
    "ChatService",
    "StructuredChatService",
    "Category",
    "Tier",
    "SentimentScore",
    "Classification",
    "Comment",
    "AnalyzeOptions",
    "Analysis",
    "CacheEntry",
    "TopicCount",
    "SentimentSummary",
    "ClassificationItem",
    "ServiceClassification",
    "ModerationResult",
    "ToneProfile",
    "GeneratedReply",
    "ReplySettings",
    "CommentScore",
]
