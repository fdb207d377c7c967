# src/comment_pulse/app/models/comment_sentiment.py
"""
CommentSentiment Model
Cached per-comment analysis, scoped by (owner, video, comment)
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, JSON, String
from sqlalchemy.orm import declarative_base

from comment_pulse.domain.models import CacheEntry, Category, SentimentScore

Base = declarative_base()


class CommentSentiment(Base):
    """
    Cached analysis row

    The text hash makes an entry valid only for the exact comment text it was
    computed from; edited comments miss and are recomputed.
    """

    __tablename__ = "comment_sentiments"

    # Composite Primary Key
    owner_id = Column(String(128), primary_key=True, comment="Requesting user")
    video_id = Column(String(64), primary_key=True, comment="Video the comment belongs to")
    comment_id = Column(String(128), primary_key=True, comment="Comment ID")

    text_hash = Column(String(64), nullable=False, comment="sha256 of normalized text")

    # Classification
    sentiment = Column(JSON, nullable=False, comment="{positive, neutral, negative}")
    category = Column(String(20), nullable=False, index=True, comment="Category label")
    topics = Column(JSON, nullable=False, default=list, comment="Ordered topic list")
    intent = Column(String(50), nullable=False, default="appreciation")
    toxicity = Column(Float, nullable=False, default=0.0)

    # Metadata
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self):
        return (
            f"<CommentSentiment(video={self.video_id}, comment={self.comment_id}, "
            f"category={self.category})>"
        )

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> "CommentSentiment":
        return cls(
            owner_id=entry.owner_id,
            video_id=entry.video_id,
            comment_id=entry.comment_id,
            text_hash=entry.text_hash,
            sentiment=entry.sentiment.to_dict(),
            category=entry.category.value,
            topics=list(entry.topics),
            intent=entry.intent,
            toxicity=entry.toxicity,
            updated_at=datetime.utcnow(),
        )

    def to_entry(self) -> CacheEntry:
        """Convert row to domain cache entry"""
        return CacheEntry(
            owner_id=self.owner_id,
            video_id=self.video_id,
            comment_id=self.comment_id,
            text_hash=self.text_hash,
            sentiment=SentimentScore.from_dict(self.sentiment or {}),
            category=Category(self.category),
            topics=list(self.topics or []),
            intent=self.intent,
            toxicity=float(self.toxicity or 0.0),
        )
