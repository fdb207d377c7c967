# src/comment_pulse/__init__.py
"""
Comment Pulse
Tiered sentiment classification for video comments
"""

from comment_pulse.domain.models import (
    Analysis,
    AnalyzeOptions,
    Category,
    Comment,
    SentimentScore,
    SentimentSummary,
    Tier,
)
from comment_pulse.services import (
    CommentAnalysisService,
    ReplyService,
    ToneService,
    analyze,
    analyze_tone,
    score_comments,
    summarize,
)

__all__ = [
    "Analysis",
    "AnalyzeOptions",
    "Category",
    "Comment",
    "SentimentScore",
    "SentimentSummary",
    "Tier",
    "CommentAnalysisService",
    "ReplyService",
    "ToneService",
    "analyze",
    "analyze_tone",
    "score_comments",
    "summarize",
]

__version__ = "0.1.0"
