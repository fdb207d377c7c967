# src/comment_pulse/services/classification/enrichment.py
"""
Derived fields computed once a comment's category and sentiment are known:
topics, intent, toxicity, and the moderation override step.
"""

import re
from typing import List, Optional, Tuple

from comment_pulse.domain.models import Category, ModerationResult, SentimentScore

TOPIC_KEYWORDS: List[Tuple[str, str]] = [
    ("audio", "audio"),
    ("compressor", "post-processing"),
    ("timestamp", "timestamps"),
]
DEFAULT_TOPIC = "general"

INTENTS = {
    Category.SPAM: "promotion",
    Category.NEGATIVE: "critique",
    Category.CONSTRUCTIVE: "suggestion",
}
DEFAULT_INTENT = "appreciation"

SPAM_TOXICITY = 0.7
NEGATIVE_TOXICITY_FLOOR = 0.4
CONSTRUCTIVE_TOXICITY = 0.15
NEUTRAL_TOXICITY_WEIGHT = 0.6

# Moderation category -> toxicity floor
MODERATION_FLOORS = {
    "hate": 0.6,
    "violence": 0.6,
    "harassment": 0.6,
    "sexual": 0.7,
    "self-harm": 0.7,
}

_URL_RE = re.compile(r"\bhttps?://")


def extract_topics(text: str) -> List[str]:
    """Keyword topics in table order, ``["general"]`` when nothing matches"""
    lowered = (text or "").lower()
    topics = [topic for keyword, topic in TOPIC_KEYWORDS if keyword in lowered]
    return topics or [DEFAULT_TOPIC]


def determine_intent(category: Category) -> str:
    return INTENTS.get(category, DEFAULT_INTENT)


def _clamp_unit(value: float) -> float:
    return min(1.0, max(0.0, value))


def calculate_toxicity(category: Category, sentiment: SentimentScore) -> float:
    """Toxicity in [0, 1] derived from category and the negative score"""
    if category == Category.SPAM:
        return SPAM_TOXICITY
    if category == Category.CONSTRUCTIVE:
        return CONSTRUCTIVE_TOXICITY

    # Service output is not trusted to stay within [0, 1]
    negative = _clamp_unit(sentiment.negative)
    if category == Category.NEGATIVE:
        return max(NEGATIVE_TOXICITY_FLOOR, negative)
    return negative * NEUTRAL_TOXICITY_WEIGHT


def apply_moderation_overrides(
    text: str,
    category: Category,
    toxicity: float,
    moderation: Optional[ModerationResult] = None,
) -> Tuple[Category, float]:
    """
    Raise category/toxicity from independent moderation signals.

    Applied after the toxicity formula. Never lowers toxicity; spam is never
    downgraded to negative.

    Args:
        text: Comment text
        category: Category from the classifying tier
        toxicity: Toxicity from ``calculate_toxicity``
        moderation: Optional moderation verdict for the same text

    Returns:
        (category, toxicity) after overrides
    """
    if moderation is not None and moderation.flagged:
        floor = MODERATION_FLOORS.get(moderation.category)
        if floor is not None:
            if category != Category.SPAM:
                category = Category.NEGATIVE
            toxicity = max(toxicity, floor)

    if _URL_RE.search(text or ""):
        return Category.SPAM, max(toxicity, SPAM_TOXICITY)

    return category, toxicity
