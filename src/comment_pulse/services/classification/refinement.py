# src/comment_pulse/services/classification/refinement.py
"""
Second-pass token scan for neutral-leaning comments.

The rule-based classifier only counts strong, well-bounded signals, which
leaves a lot of short comments ("lol", "nice", "sucks") in the neutral bucket.
This pass looks for looser substring tokens before settling on neutral.
"""

from comment_pulse.domain.models import Category, Classification, SentimentScore

REFINED_POSITIVE = SentimentScore(positive=0.65, neutral=0.25, negative=0.10)
REFINED_NEGATIVE = SentimentScore(positive=0.10, neutral=0.25, negative=0.65)
REFINED_CONSTRUCTIVE = SentimentScore(positive=0.35, neutral=0.40, negative=0.25)

POSITIVE_TOKENS = (
    "love", "amazing", "awesome", "great", "fantastic", "so good", "fire",
    "🔥", "❤️", "😂", "lol", "lmao", "best", "incredible", "haha",
    "nice", "cool", "good",
)
NEGATIVE_TOKENS = (
    "hate", "terrible", "awful", "trash", "cringe", "worst", "boring",
    "disappointing", "bad", "stupid", "dumb", "🤮", "👎", "💩", "sucks", "suck",
)
QUESTION_SUGGESTION_TOKENS = (
    "you should", "could you", "can you", "why don't you", "why dont you",
    "idk if", "i think you should", "maybe try", "?", "what if", "how about",
)


def refine_neutral(text: str, base: SentimentScore) -> Classification:
    """
    Reclassify a neutral-leaning comment from weak token signals.

    Args:
        text: Comment text
        base: Sentiment to keep if the comment really is neutral

    Returns:
        Positive, negative or constructive when a token fires, else neutral
        with ``base`` unchanged
    """
    lowered = (text or "").lower()

    has_positive = any(token in lowered for token in POSITIVE_TOKENS)
    has_negative = any(token in lowered for token in NEGATIVE_TOKENS)
    has_question = any(token in lowered for token in QUESTION_SUGGESTION_TOKENS)

    if has_positive and not has_negative:
        return Classification(Category.POSITIVE, REFINED_POSITIVE)
    if has_negative and not has_positive:
        return Classification(Category.NEGATIVE, REFINED_NEGATIVE)
    if (has_positive and has_negative) or has_question:
        return Classification(Category.CONSTRUCTIVE, REFINED_CONSTRUCTIVE)

    return Classification(Category.NEUTRAL, base)
