# src/comment_pulse/services/comment_scoring.py
"""
Comment Prioritization
Ranks comments by how much they deserve a creator reply

Scores build on the per-comment analyses: spam and sentiment come from the
classification pipeline, the rest from the comment itself.
"""

import logging
import re
from typing import Any, Iterable, List, Optional, Sequence

from comment_pulse.domain.models import (
    Analysis,
    Category,
    Comment,
    CommentScore,
    ReplySettings,
)
from comment_pulse.services.analysis_service import coerce_comments, index_by_comment

logger = logging.getLogger(__name__)

# Priority weights
QUESTION_WEIGHT = 25
NEGATIVE_WEIGHT = 30
KEYWORD_WEIGHT = 15
POPULAR_WEIGHT = 10

POPULAR_LIKE_THRESHOLD = 5
AUTO_REPLY_THRESHOLD = 25
MIN_TITLE_KEYWORD_LEN = 4

GENERIC_PRAISE_PATTERNS = [
    re.compile(r"^(great|nice|good|cool|awesome|amazing) video!?$", re.IGNORECASE),
    re.compile(r"^love (it|this)!?$", re.IGNORECASE),
    re.compile("^(?:❤️?)+$"),
    re.compile("^👍+$"),
    re.compile(r"^first!?$", re.IGNORECASE),
    re.compile(r"^thank you!?$", re.IGNORECASE),
]
LINK_PATTERN = re.compile(r"https?://")
QUESTION_PATTERN = re.compile(
    r"\?|^(how|what|why|when|where|which|who|can|could|does|do|is|are|should|would|will)\b",
    re.IGNORECASE,
)
TITLE_WORD_PATTERN = re.compile(r"[\w'-]+")


# ============================================================================
# Signals
# ============================================================================


def is_generic_praise(text: str) -> bool:
    stripped = (text or "").strip()
    return any(pattern.search(stripped) for pattern in GENERIC_PRAISE_PATTERNS)


def is_question(text: str) -> bool:
    return bool(QUESTION_PATTERN.search((text or "").strip()))


def matched_keywords(
    comment_text: str, video_title: str, custom_keywords: Sequence[str] = ()
) -> List[str]:
    """
    Title words (4+ chars) and custom keywords found in the comment

    Args:
        comment_text: Comment being scored
        video_title: Title of the video the comment belongs to
        custom_keywords: Creator-defined keywords

    Returns:
        Matched keywords, lowercased, first occurrence order, no duplicates
    """
    candidates = [
        word
        for word in TITLE_WORD_PATTERN.findall((video_title or "").lower())
        if len(word) >= MIN_TITLE_KEYWORD_LEN
    ]
    candidates.extend(k.strip().lower() for k in custom_keywords if k and k.strip())

    lowered = (comment_text or "").lower()
    return [keyword for keyword in dict.fromkeys(candidates) if keyword in lowered]


def sentiment_label(category: Category) -> str:
    if category == Category.POSITIVE:
        return "positive"
    if category == Category.NEGATIVE:
        return "negative"
    return "neutral"


# ============================================================================
# Scoring
# ============================================================================


def score_comment(
    comment: Comment,
    analysis: Optional[Analysis],
    video_title: str = "",
    settings: Optional[ReplySettings] = None,
) -> CommentScore:
    """
    Reply priority of one comment

    Ignore rules (spam, generic praise, links) short-circuit to a score
    of 0. Otherwise each enabled signal adds its weight.

    Args:
        comment: Comment to score
        analysis: Its pipeline analysis (None scores it as neutral, not spam)
        video_title: Title used for keyword matching
        settings: Creator priorities (defaults if not provided)

    Returns:
        CommentScore
    """
    settings = settings or ReplySettings()
    text = comment.text
    category = analysis.category if analysis is not None else Category.NEUTRAL
    sentiment = sentiment_label(category)
    question = is_question(text)
    spam = category == Category.SPAM

    def ignored(reason: str) -> CommentScore:
        return CommentScore(
            comment_id=comment.id,
            priority_score=0,
            reasons=[reason],
            should_auto_reply=False,
            sentiment=sentiment,
            is_question=question,
            is_spam=spam,
        )

    if settings.ignore_spam and spam:
        return ignored("Flagged as likely spam")
    if settings.ignore_generic_praise and is_generic_praise(text):
        return ignored("Generic praise with no substance")
    if settings.ignore_links and LINK_PATTERN.search(text):
        return ignored("Contains link (often spam)")

    score = 0
    reasons: List[str] = []

    if settings.prioritize_questions and question:
        score += QUESTION_WEIGHT
        reasons.append("Contains a question")

    if settings.prioritize_negative and category == Category.NEGATIVE:
        score += NEGATIVE_WEIGHT
        reasons.append("Negative sentiment - needs attention")

    if settings.prioritize_title_keywords:
        keywords = matched_keywords(text, video_title, settings.custom_keywords)
        if keywords:
            score += KEYWORD_WEIGHT
            reasons.append(f"Mentions: {', '.join(keywords)}")

    if settings.prioritize_popular and comment.like_count >= POPULAR_LIKE_THRESHOLD:
        score += POPULAR_WEIGHT
        reasons.append(f"{comment.like_count} likes from community")

    return CommentScore(
        comment_id=comment.id,
        priority_score=score,
        reasons=reasons,
        should_auto_reply=score >= AUTO_REPLY_THRESHOLD,
        sentiment=sentiment,
        is_question=question,
        is_spam=spam,
    )


def score_comments(
    comments: Any,
    analyses: Iterable[Analysis],
    video_title: str = "",
    settings: Optional[ReplySettings] = None,
) -> List[CommentScore]:
    """
    Score and rank comments for replying

    Args:
        comments: List of comment mappings or Comment models
        analyses: Pipeline results for those comments (matched by id)
        video_title: Title used for keyword matching
        settings: Creator priorities (defaults if not provided)

    Returns:
        Scores sorted by priority, highest first; ties keep input order

    Raises:
        ValidationError: Invalid comment list
    """
    parsed = coerce_comments(comments)
    by_id = index_by_comment(analyses)
    settings = settings or ReplySettings()

    scores = [
        score_comment(comment, by_id.get(comment.id), video_title, settings)
        for comment in parsed
    ]
    scores.sort(key=lambda s: s.priority_score, reverse=True)

    auto = sum(1 for s in scores if s.should_auto_reply)
    logger.info(f"✅ Scored {len(scores)} comments ({auto} suggested for reply)")
    return scores
