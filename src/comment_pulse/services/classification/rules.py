# src/comment_pulse/services/classification/rules.py
"""
Rule-Based Classifier
Fast first-pass classification that resolves obvious comments without any
external call.

Confidently classifies:
- Clear spam (URLs, self-promotion, "free" giveaways)
- Short praise with positive signals
- Clear criticism with negative signals
- Questions and suggestion-style feedback

Returns ``None`` ("uncertain") only for long or heavily mixed comments, which
are deferred to the external classification service.
"""

import re
from typing import List, Optional

from comment_pulse.domain.models import Category, Classification, SentimentScore
from comment_pulse.services.classification.refinement import refine_neutral

# ============================================================================
# Sentiment Constants
# ============================================================================

SPAM_SENTIMENT = SentimentScore(positive=0.05, neutral=0.15, negative=0.80)

STRONG_POSITIVE = SentimentScore(positive=0.85, neutral=0.10, negative=0.05)
MEDIUM_POSITIVE = SentimentScore(positive=0.75, neutral=0.20, negative=0.05)
EMOJI_POSITIVE = SentimentScore(positive=0.90, neutral=0.05, negative=0.05)

STRONG_NEGATIVE = SentimentScore(positive=0.05, neutral=0.15, negative=0.80)
MEDIUM_NEGATIVE = SentimentScore(positive=0.10, neutral=0.20, negative=0.70)

QUESTION_CONSTRUCTIVE = SentimentScore(positive=0.40, neutral=0.45, negative=0.15)
FEEDBACK_CONSTRUCTIVE = SentimentScore(positive=0.35, neutral=0.45, negative=0.20)

NEUTRAL_BASE = SentimentScore(positive=0.15, neutral=0.75, negative=0.10)
MIXED_BASE = SentimentScore(positive=0.30, neutral=0.50, negative=0.20)
RESIDUAL_BASE = SentimentScore(positive=0.20, neutral=0.65, negative=0.15)

# Length thresholds (characters)
SHORT_PRAISE_MAX_LEN = 150
EMOJI_ONLY_MAX_LEN = 80
LONG_COMMENT_LEN = 300

# ============================================================================
# Patterns
# ============================================================================

URL_PATTERN = re.compile(r"https?://")
SELF_PROMO_PATTERN = re.compile(
    r"(check out|subscribe to|visit|follow) (my|our) "
    r"(channel|page|instagram|twitter|tiktok)",
    re.IGNORECASE,
)
FREE_PATTERN = re.compile(r"\bfree\b", re.IGNORECASE)
PROMO_WORD_PATTERN = re.compile(r"(click|download|win|prize|offer|gift)", re.IGNORECASE)

# Positive signals
POSITIVE_WORDS = re.compile(
    r"\b(love|adore|amazing|awesome|excellent|fantastic|brilliant|perfect|great|"
    r"wonderful|beautiful|best|favorite|favourite|incredible|outstanding|"
    r"phenomenal|masterpiece|legend|goat|fire)\b",
    re.IGNORECASE,
)
POSITIVE_SLANG = re.compile(
    r"\b(lit|dope|sick|banger|bussin|slaps|vibes|based|chad|gigachad|W|king|queen)\b",
    re.IGNORECASE,
)
POSITIVE_EMOJI = re.compile(
    "❤️?|😊|😍|🎉|💯|👍|🔥|✨|⭐|🙌|😎|🤩|😄|😁|🥰|💪|👏|🏆|💕|💖"
)
GRATITUDE = re.compile(
    r"\b(thank|thanks|thx|ty|appreciate|grateful|appreciate it|bless)\b",
    re.IGNORECASE,
)
SUPPORTIVE = re.compile(
    r"\b(keep it up|keep going|you got this|well done|good job|nice work|proud|"
    r"respect|salute)\b",
    re.IGNORECASE,
)

# Negative signals
NEGATIVE_WORDS = re.compile(
    r"\b(hate|terrible|awful|worst|horrible|trash|garbage|suck|boring|lame|"
    r"cringe|crappy|pathetic)\b",
    re.IGNORECASE,
)
DISAPPOINTMENT = re.compile(
    r"\b(disappointed|letdown|let down|underwhelming|meh|overrated|overhyped)\b",
    re.IGNORECASE,
)
NEGATIVE_EMOJI = re.compile("😠|😡|👎|💩|😢|😭|😤|🤮|😒|🙄|😑")
PROFANITY = re.compile(
    r"\b(f+u+c+k|sh+i+t|d+a+m+n|hell|crap|piss|ass|bitch|wtf)\b", re.IGNORECASE
)

# Constructive signals
QUESTION_END = re.compile(r"\?\Z")
SUGGESTION = re.compile(
    r"\b(could|should|would|might|perhaps|maybe|consider|suggest|recommend|idea|"
    r"what if|how about)\b",
    re.IGNORECASE,
)
FEEDBACK = re.compile(
    r"\b(but|however|although|though|except|improvement|improve|better|fix|"
    r"issue|problem)\b",
    re.IGNORECASE,
)

POSITIVE_SIGNALS: List[re.Pattern] = [
    POSITIVE_WORDS,
    POSITIVE_SLANG,
    POSITIVE_EMOJI,
    GRATITUDE,
    SUPPORTIVE,
]
NEGATIVE_SIGNALS: List[re.Pattern] = [
    NEGATIVE_WORDS,
    DISAPPOINTMENT,
    NEGATIVE_EMOJI,
    PROFANITY,
]
CONSTRUCTIVE_SIGNALS: List[re.Pattern] = [SUGGESTION, FEEDBACK]


# ============================================================================
# Helpers
# ============================================================================


def _count_signals(patterns: List[re.Pattern], text: str) -> int:
    return sum(1 for pattern in patterns if pattern.search(text))


def is_spam(text: str) -> bool:
    """URL, self-promotion phrase, or a 'free' giveaway pitch"""
    if URL_PATTERN.search(text):
        return True
    if SELF_PROMO_PATTERN.search(text):
        return True
    return bool(FREE_PATTERN.search(text) and PROMO_WORD_PATTERN.search(text))


# ============================================================================
# Classifier
# ============================================================================


def heuristic_classify(text: str) -> Optional[Classification]:
    """
    Classify a comment with ordered rules; first matching rule wins.

    Args:
        text: Raw comment text (may be empty)

    Returns:
        Confident classification, or None when the comment should be
        deferred to the external classification service
    """
    text = text or ""
    length = len(text)

    if is_spam(text):
        return Classification(Category.SPAM, SPAM_SENTIMENT)

    positive = _count_signals(POSITIVE_SIGNALS, text)
    negative = _count_signals(NEGATIVE_SIGNALS, text)
    constructive = _count_signals(CONSTRUCTIVE_SIGNALS, text)

    # Positive
    if positive >= 2 and negative == 0:
        return Classification(Category.POSITIVE, STRONG_POSITIVE)
    if positive >= 1 and negative == 0 and length < SHORT_PRAISE_MAX_LEN:
        return Classification(Category.POSITIVE, MEDIUM_POSITIVE)
    emoji_count = len(POSITIVE_EMOJI.findall(text))
    if emoji_count >= 2 and length < EMOJI_ONLY_MAX_LEN and negative == 0:
        return Classification(Category.POSITIVE, EMOJI_POSITIVE)

    # Negative
    if negative >= 2:
        return Classification(Category.NEGATIVE, STRONG_NEGATIVE)
    if negative >= 1 and positive == 0:
        return Classification(Category.NEGATIVE, MEDIUM_NEGATIVE)

    # Constructive
    if QUESTION_END.search(text) and negative <= 1 and positive <= 1:
        return Classification(Category.CONSTRUCTIVE, QUESTION_CONSTRUCTIVE)
    if constructive >= 1 and (positive > 0 or negative > 0):
        return Classification(Category.CONSTRUCTIVE, FEEDBACK_CONSTRUCTIVE)

    # Neutral-leaning: second pass decides
    if positive == 0 and negative == 0:
        return refine_neutral(text, NEUTRAL_BASE)
    if positive == 1 and negative >= 1:
        return refine_neutral(text, MIXED_BASE)

    # Long or heavily mixed: defer
    if length > LONG_COMMENT_LEN or (
        constructive >= 2 and positive >= 2 and negative >= 1
    ):
        return None

    return refine_neutral(text, RESIDUAL_BASE)
