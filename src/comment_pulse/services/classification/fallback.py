# src/comment_pulse/services/classification/fallback.py
"""
Keyword fallback classifier.

Backstop for comments the external service could not classify. Total and
deterministic, so every comment gets a result even during a full outage.
"""

import re
from typing import Dict

from comment_pulse.domain.models import Category, Classification, SentimentScore

FALLBACK_SENTIMENTS: Dict[Category, SentimentScore] = {
    Category.POSITIVE: SentimentScore(positive=0.85, neutral=0.10, negative=0.05),
    Category.CONSTRUCTIVE: SentimentScore(positive=0.45, neutral=0.35, negative=0.20),
    Category.NEGATIVE: SentimentScore(positive=0.10, neutral=0.20, negative=0.70),
    Category.SPAM: SentimentScore(positive=0.05, neutral=0.15, negative=0.80),
    Category.NEUTRAL: SentimentScore(positive=0.20, neutral=0.70, negative=0.10),
}

_SPAM_RE = re.compile(r"\bfree\b|https?://")
_GOOD_RE = re.compile(r"\b(good|better)\b")
_POSITIVE_EMOJI_RE = re.compile("👍|😊|😍|🎉|💯")

CONSTRUCTIVE_KEYWORDS = ("constructive", "compressor", "could you", "suggest")
# Negative is checked before positive so "didn't love it" lands here
NEGATIVE_KEYWORDS = ("meh", "didn't", "didnt", "bad", "terrible", "awful", "worst")
POSITIVE_KEYWORDS = (
    "love", "❤", "helpful", "great", "amazing", "awesome", "excellent",
    "wonderful", "fantastic", "best", "thank", "thanks", "appreciate",
    "congrat", "well done", "good job", "nice", "beautiful", "perfect",
    "brilliant",
)


def classify_category(text: str) -> Category:
    """Pick a category from a small fixed keyword table"""
    lowered = (text or "").lower()

    if _SPAM_RE.search(lowered):
        return Category.SPAM
    if any(k in lowered for k in CONSTRUCTIVE_KEYWORDS):
        return Category.CONSTRUCTIVE
    if any(k in lowered for k in NEGATIVE_KEYWORDS):
        return Category.NEGATIVE
    if (
        any(k in lowered for k in POSITIVE_KEYWORDS)
        or _GOOD_RE.search(lowered)
        or _POSITIVE_EMOJI_RE.search(lowered)
    ):
        return Category.POSITIVE
    return Category.NEUTRAL


def fallback_sentiment(category: Category) -> SentimentScore:
    return FALLBACK_SENTIMENTS[category]


def fallback_classify(text: str) -> Classification:
    """Keyword category paired with its fixed sentiment vector"""
    category = classify_category(text)
    return Classification(category, fallback_sentiment(category))
