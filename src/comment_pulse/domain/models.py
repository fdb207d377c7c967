# src/comment_pulse/domain/models.py
"""
Domain models for the comment classification pipeline.

Input shapes (``Comment``, ``AnalyzeOptions``, ``ToneProfile``) are Pydantic
models so every caller hits one validated boundary. Everything the pipeline
produces is a plain dataclass DTO.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, enum.Enum):
    """Primary classification label of a comment"""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    CONSTRUCTIVE = "constructive"
    NEGATIVE = "negative"
    SPAM = "spam"


class Tier(str, enum.Enum):
    """Caller tier, controls the batch concurrency ceiling"""

    FREE = "free"
    PRO = "pro"

    @classmethod
    def resolve(cls, value: Any) -> "Tier":
        """Map any caller-supplied value onto a tier; unknown values are FREE."""
        if isinstance(value, Tier):
            return value
        if isinstance(value, str) and value.strip().lower() == cls.PRO.value:
            return cls.PRO
        return cls.FREE


@dataclass(frozen=True)
class SentimentScore:
    """Three-way sentiment distribution (not re-normalized)"""

    positive: float
    neutral: float
    negative: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "positive": self.positive,
            "neutral": self.neutral,
            "negative": self.negative,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SentimentScore":
        return cls(
            positive=float(data.get("positive", 0.0)),
            neutral=float(data.get("neutral", 0.0)),
            negative=float(data.get("negative", 0.0)),
        )


@dataclass(frozen=True)
class Classification:
    """Category plus sentiment, as produced by the rule-based tiers"""

    category: Category
    sentiment: SentimentScore


# ============================================================================
# Request Boundary
# ============================================================================


class Comment(BaseModel):
    """A user comment as supplied by the caller. Classification reads only id and text."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    text: str = ""
    author: Optional[str] = None
    published_at: Optional[str] = Field(default=None, alias="publishedAt")
    like_count: int = Field(default=0, alias="likeCount")

    @field_validator("text", mode="before")
    @classmethod
    def missing_text_is_empty(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("like_count", mode="before")
    @classmethod
    def missing_likes_is_zero(cls, v: Any) -> int:
        return 0 if v is None else v


class AnalyzeOptions(BaseModel):
    """Per-request options for ``analyze``"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    video_id: Optional[str] = Field(default=None, alias="videoId")
    tier: Tier = Tier.FREE
    batch_size: Optional[int] = Field(default=None, alias="batchSize", gt=0)

    @field_validator("tier", mode="before")
    @classmethod
    def resolve_tier(cls, v: Any) -> Tier:
        return Tier.resolve(v)

    @property
    def cache_scoped(self) -> bool:
        """Cache is only consulted when the (owner, video) scope is known."""
        return bool(self.owner_id and self.video_id)


# ============================================================================
# Pipeline Output
# ============================================================================


@dataclass
class Analysis:
    """Final per-comment result"""

    comment_id: str
    sentiment: SentimentScore
    topics: List[str]
    intent: str
    toxicity: float
    category: Category

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commentId": self.comment_id,
            "sentiment": self.sentiment.to_dict(),
            "topics": list(self.topics),
            "intent": self.intent,
            "toxicity": self.toxicity,
            "category": self.category.value,
        }


@dataclass
class CacheEntry:
    """Stored result of a previous computation, keyed by (owner, video, comment)"""

    owner_id: str
    video_id: str
    comment_id: str
    text_hash: str
    sentiment: SentimentScore
    category: Category
    topics: List[str]
    intent: str
    toxicity: float

    def to_analysis(self) -> Analysis:
        return Analysis(
            comment_id=self.comment_id,
            sentiment=self.sentiment,
            topics=list(self.topics) or ["general"],
            intent=self.intent,
            toxicity=self.toxicity,
            category=self.category,
        )


@dataclass
class TopicCount:
    topic: str
    count: int


@dataclass
class SentimentSummary:
    """Aggregate view over a list of analyses"""

    overall_sentiment: str
    average_scores: SentimentScore
    total_comments: int
    top_topics: List[TopicCount] = field(default_factory=list)
    toxicity_level: str = "low"
    counts: Dict[Category, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallSentiment": self.overall_sentiment,
            "averageScores": self.average_scores.to_dict(),
            "totalComments": self.total_comments,
            "topTopics": [{"topic": t.topic, "count": t.count} for t in self.top_topics],
            "toxicityLevel": self.toxicity_level,
            "counts": {c.value: n for c, n in self.counts.items()},
        }


# ============================================================================
# External Collaborator DTOs
# ============================================================================


@dataclass(frozen=True)
class ClassificationItem:
    """One uncertain comment sent to the external classification service"""

    id: str
    text: str


@dataclass
class ServiceClassification:
    """Per-item result returned by the external classification service"""

    id: str
    category: Category
    sentiment: SentimentScore
    topics: List[str]
    intent: str


@dataclass
class ModerationResult:
    """hate | violence | harassment | sexual | self-harm | none"""

    flagged: bool = False
    category: str = "none"


class ToneProfile(BaseModel):
    """Learned writing style of a creator, used to personalize replies"""

    tone: str
    formality_level: Literal["very_casual", "casual", "neutral", "formal"]
    emoji_usage: Literal["never", "rarely", "sometimes", "frequently"]
    common_emojis: List[str] = Field(default_factory=list)
    avg_reply_length: Literal["short", "medium", "long"]
    common_phrases: List[str] = Field(default_factory=list)
    uses_name: bool = False
    asks_questions: bool = False
    uses_commenter_name: bool = False


@dataclass
class GeneratedReply:
    tone: str
    reply: str


# ============================================================================
# Reply Prioritization
# ============================================================================


class ReplySettings(BaseModel):
    """Creator preferences for which comments deserve a reply first"""

    model_config = ConfigDict(extra="ignore")

    prioritize_questions: bool = True
    prioritize_title_keywords: bool = True
    prioritize_negative: bool = True
    prioritize_popular: bool = False
    custom_keywords: List[str] = Field(default_factory=list)
    ignore_spam: bool = True
    ignore_generic_praise: bool = False
    ignore_links: bool = True


@dataclass
class CommentScore:
    """Reply priority of one comment (0 means ignore)"""

    comment_id: str
    priority_score: int
    reasons: List[str]
    should_auto_reply: bool
    sentiment: str
    is_question: bool
    is_spam: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commentId": self.comment_id,
            "priorityScore": self.priority_score,
            "reasons": list(self.reasons),
            "shouldAutoReply": self.should_auto_reply,
            "sentiment": self.sentiment,
            "isQuestion": self.is_question,
            "isSpam": self.is_spam,
        }


__all__ = [
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
