# tests/unit/test_comment_scoring.py
"""
Unit Tests for reply prioritization
"""

import pytest

from comment_pulse.domain.models import (
    Analysis,
    Category,
    Comment,
    ReplySettings,
    SentimentScore,
)
from comment_pulse.services.comment_scoring import (
    AUTO_REPLY_THRESHOLD,
    is_generic_praise,
    is_question,
    matched_keywords,
    score_comment,
    score_comments,
)
from comment_pulse.services.exceptions import ValidationError

TITLE = "Mixing Vocals in Ableton"


def analysis(comment_id, category=Category.NEUTRAL):
    return Analysis(
        comment_id=comment_id,
        sentiment=SentimentScore(0.2, 0.7, 0.1),
        topics=["general"],
        intent="appreciation",
        toxicity=0.06,
        category=category,
    )


def comment(comment_id, text, likes=0):
    return Comment(id=comment_id, text=text, likeCount=likes)


# ============================================================================
# Signals
# ============================================================================


class TestSignals:
    """Test text signals used for scoring"""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("What plugin is that?", True),
            ("how did you get that reverb", True),
            ("Should I buy this", True),
            ("Great mix", False),
            ("Somehow it works", False),
        ],
    )
    def test_is_question(self, text, expected):
        assert is_question(text) is expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Great video!", True),
            ("love this", True),
            ("❤️❤️", True),
            ("👍👍👍", True),
            ("First!", True),
            ("Great video, the vocal chain tip saved me", False),
        ],
    )
    def test_is_generic_praise(self, text, expected):
        assert is_generic_praise(text) is expected

    def test_keywords_from_title_and_custom(self):
        """Test short title words are skipped and duplicates collapse"""
        keywords = matched_keywords(
            "Your vocals in Ableton sound huge, and that sidechain too",
            TITLE,
            ["Sidechain", "vocals"],
        )

        assert keywords == ["vocals", "ableton", "sidechain"]

    def test_no_keywords(self):
        assert matched_keywords("nice one", TITLE) == []


# ============================================================================
# Scoring
# ============================================================================


class TestScoreComment:
    """Test priority weights and ignore rules"""

    def test_negative_question_with_keyword(self):
        result = score_comment(
            comment("c1", "Why do the vocals clip?"),
            analysis("c1", Category.NEGATIVE),
            TITLE,
        )

        assert result.priority_score == 25 + 30 + 15
        assert result.reasons == [
            "Contains a question",
            "Negative sentiment - needs attention",
            "Mentions: vocals",
        ]
        assert result.should_auto_reply is True
        assert result.sentiment == "negative"
        assert result.is_question is True

    def test_keyword_alone_is_below_threshold(self):
        result = score_comment(comment("c1", "The vocals are clean"), analysis("c1"), TITLE)

        assert result.priority_score == 15
        assert result.priority_score < AUTO_REPLY_THRESHOLD
        assert result.should_auto_reply is False

    def test_question_alone_reaches_threshold(self):
        result = score_comment(comment("c1", "Which mic?"), analysis("c1"), TITLE)

        assert result.priority_score == AUTO_REPLY_THRESHOLD
        assert result.should_auto_reply is True

    def test_popular_only_when_enabled(self):
        liked = comment("c1", "Nice work", likes=12)

        assert score_comment(liked, analysis("c1")).priority_score == 0

        settings = ReplySettings(prioritize_popular=True)
        result = score_comment(liked, analysis("c1"), settings=settings)
        assert result.priority_score == 10
        assert result.reasons == ["12 likes from community"]

    def test_disabled_signals_score_nothing(self):
        settings = ReplySettings(
            prioritize_questions=False,
            prioritize_negative=False,
            prioritize_title_keywords=False,
        )

        result = score_comment(
            comment("c1", "Why do the vocals clip?"),
            analysis("c1", Category.NEGATIVE),
            TITLE,
            settings,
        )

        assert result.priority_score == 0
        assert result.reasons == []

    def test_spam_is_ignored(self):
        result = score_comment(
            comment("c1", "What do you think of my channel?"),
            analysis("c1", Category.SPAM),
            TITLE,
        )

        assert result.priority_score == 0
        assert result.reasons == ["Flagged as likely spam"]
        assert result.is_spam is True
        assert result.should_auto_reply is False

    def test_spam_scored_when_not_ignored(self):
        """Test is_spam is still reported when spam is scored"""
        result = score_comment(
            comment("c1", "Which mic?"),
            analysis("c1", Category.SPAM),
            settings=ReplySettings(ignore_spam=False),
        )

        assert result.priority_score == 25
        assert result.is_spam is True
        assert result.sentiment == "neutral"

    def test_links_are_ignored(self):
        result = score_comment(
            comment("c1", "Why not use https://example.com/plugin ?"), analysis("c1")
        )

        assert result.priority_score == 0
        assert result.reasons == ["Contains link (often spam)"]

    def test_generic_praise_only_when_enabled(self):
        text = comment("c1", "Great video!")

        assert score_comment(text, analysis("c1")).reasons == []

        result = score_comment(
            text, analysis("c1"), settings=ReplySettings(ignore_generic_praise=True)
        )
        assert result.reasons == ["Generic praise with no substance"]

    def test_to_dict(self):
        result = score_comment(comment("c1", "Which mic?"), analysis("c1", Category.POSITIVE))

        assert result.to_dict() == {
            "commentId": "c1",
            "priorityScore": 25,
            "reasons": ["Contains a question"],
            "shouldAutoReply": True,
            "sentiment": "positive",
            "isQuestion": True,
            "isSpam": False,
        }


class TestScoreComments:
    """Test ranking a comment list"""

    def test_sorted_by_priority(self):
        comments = [
            {"id": "low", "text": "Nice"},
            {"id": "high", "text": "Why do the vocals clip?"},
            {"id": "mid", "text": "Which mic?"},
            {"id": "tie", "text": "What preamp?"},
        ]
        analyses = [
            analysis("low"),
            analysis("high", Category.NEGATIVE),
            analysis("mid"),
            analysis("tie"),
        ]

        scores = score_comments(comments, analyses, TITLE)

        assert [s.comment_id for s in scores] == ["high", "mid", "tie", "low"]

    def test_missing_analysis_is_neutral(self):
        scores = score_comments([{"id": "c1", "text": "Which mic?"}], [])

        assert scores[0].sentiment == "neutral"
        assert scores[0].is_spam is False
        assert scores[0].priority_score == 25

    def test_later_duplicate_analysis_wins(self):
        scores = score_comments(
            [{"id": "c1", "text": "ok"}],
            [analysis("c1", Category.SPAM), analysis("c1", Category.NEGATIVE)],
        )

        assert scores[0].sentiment == "negative"
        assert scores[0].priority_score == 30

    def test_empty_list(self):
        assert score_comments([], []) == []

    def test_invalid_comments_rejected(self):
        with pytest.raises(ValidationError):
            score_comments("not a list", [])
