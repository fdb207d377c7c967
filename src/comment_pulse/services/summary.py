# src/comment_pulse/services/summary.py
"""
Sentiment Summary
Aggregates per-comment analyses into one overview
"""

from collections import Counter
from typing import Dict, Sequence

from comment_pulse.domain.models import (
    Analysis,
    Category,
    SentimentScore,
    SentimentSummary,
    TopicCount,
)

TOP_TOPICS_LIMIT = 5


def overall_label(average: SentimentScore) -> str:
    if average.positive > 0.5:
        return "positive"
    if average.negative > 0.5:
        return "negative"
    if average.positive > average.negative:
        return "mixed"
    return "neutral"


def toxicity_level(avg_toxicity: float, spam_or_negative_ratio: float) -> str:
    if avg_toxicity > 0.5 or spam_or_negative_ratio > 0.5:
        return "high"
    if avg_toxicity > 0.2 or spam_or_negative_ratio > 0.25:
        return "moderate"
    return "low"


def summarize(analyses: Sequence[Analysis]) -> SentimentSummary:
    """
    Summarize analyses

    Args:
        analyses: Per-comment results (may be empty)

    Returns:
        SentimentSummary with averages, counts, top 5 topics and toxicity level
    """
    total = len(analyses)
    denominator = total or 1

    average = SentimentScore(
        positive=sum(a.sentiment.positive for a in analyses) / denominator,
        neutral=sum(a.sentiment.neutral for a in analyses) / denominator,
        negative=sum(a.sentiment.negative for a in analyses) / denominator,
    )

    counts: Dict[Category, int] = {category: 0 for category in Category}
    for a in analyses:
        counts[a.category] += 1

    avg_toxicity = sum(a.toxicity for a in analyses) / denominator
    spam_or_negative = (counts[Category.SPAM] + counts[Category.NEGATIVE]) / denominator

    # Counter keeps first-seen order; sorted() is stable, so ties stay in that order
    topic_counts = Counter(topic for a in analyses for topic in a.topics)
    ranked = sorted(topic_counts.items(), key=lambda kv: kv[1], reverse=True)

    return SentimentSummary(
        overall_sentiment=overall_label(average),
        average_scores=average,
        total_comments=total,
        top_topics=[TopicCount(t, n) for t, n in ranked[:TOP_TOPICS_LIMIT]],
        toxicity_level=toxicity_level(avg_toxicity, spam_or_negative),
        counts=counts,
    )
