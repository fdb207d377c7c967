# tests/unit/test_tone_service.py
"""
Unit Tests for ToneService
"""

import pytest
from unittest.mock import AsyncMock, Mock

from comment_pulse.services.exceptions import (
    ConfigurationError,
    LLMServiceError,
    RateLimitExceededError,
    ValidationError,
)
from comment_pulse.services.tone_service import (
    MAX_SAMPLE_REPLIES,
    ToneService,
    analyze_tone,
    build_tone_prompt,
)

PROFILE = {
    "tone": "enthusiastic",
    "formality_level": "casual",
    "emoji_usage": "sometimes",
    "common_emojis": ["🔥"],
    "avg_reply_length": "short",
    "common_phrases": ["appreciate you"],
    "uses_name": False,
    "asks_questions": True,
    "uses_commenter_name": False,
}

REPLIES = ["Appreciate you! 🔥", "Thanks for watching, what should I cover next?"]


def chat_returning(value=None, side_effect=None):
    chat = Mock()
    chat.chat_json = AsyncMock(return_value=value, side_effect=side_effect)
    return chat


class TestToneService:
    """Test tone profile extraction"""

    @pytest.mark.asyncio
    async def test_valid_profile(self, app_config):
        chat = chat_returning(PROFILE)
        service = ToneService(chat=chat, config=app_config)

        profile = await service.analyze_tone(REPLIES)

        assert profile.tone == "enthusiastic"
        assert profile.emoji_usage == "sometimes"
        assert profile.asks_questions is True
        system, user = chat.chat_json.await_args.args
        assert "JSON" in system
        assert '1. "Appreciate you! 🔥"' in user
        assert "Below are 2 past replies" in user

    @pytest.mark.asyncio
    async def test_module_level_helper(self, app_config):
        profile = await analyze_tone(REPLIES, chat=chat_returning(PROFILE), config=app_config)

        assert profile.formality_level == "casual"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("replies", [[], ["", "   "], None])
    async def test_no_replies_rejected(self, app_config, replies):
        """Test empty input fails before any request"""
        chat = chat_returning(PROFILE)
        service = ToneService(chat=chat, config=app_config)

        with pytest.raises(ValidationError) as exc_info:
            await service.analyze_tone(replies)

        assert exc_info.value.field == "replies"
        chat.chat_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_single_string_rejected(self, app_config):
        service = ToneService(chat=chat_returning(PROFILE), config=app_config)

        with pytest.raises(ValidationError):
            await service.analyze_tone("just one reply")

    @pytest.mark.asyncio
    async def test_without_chat(self, app_config):
        service = ToneService(config=app_config)

        with pytest.raises(ConfigurationError):
            await service.analyze_tone(REPLIES)

    @pytest.mark.asyncio
    async def test_invalid_profile(self, app_config):
        """Test out-of-vocabulary values are rejected"""
        bad = dict(PROFILE, formality_level="informal")
        service = ToneService(chat=chat_returning(bad), config=app_config)

        with pytest.raises(LLMServiceError):
            await service.analyze_tone(REPLIES)

    @pytest.mark.asyncio
    async def test_chat_error_propagates(self, app_config):
        chat = chat_returning(side_effect=RateLimitExceededError("openai"))
        service = ToneService(chat=chat, config=app_config)

        with pytest.raises(RateLimitExceededError):
            await service.analyze_tone(REPLIES)

    @pytest.mark.asyncio
    async def test_sample_is_capped(self, app_config):
        chat = chat_returning(PROFILE)
        service = ToneService(chat=chat, config=app_config)

        await service.analyze_tone([f"reply number {i}" for i in range(80)])

        _, user = chat.chat_json.await_args.args
        assert f"Below are {MAX_SAMPLE_REPLIES} past replies" in user
        assert f'{MAX_SAMPLE_REPLIES}. "reply number {MAX_SAMPLE_REPLIES - 1}"' in user
        assert f'"reply number {MAX_SAMPLE_REPLIES}"' not in user


class TestTonePrompt:
    """Test prompt construction"""

    def test_replies_are_numbered(self):
        prompt = build_tone_prompt(["a", "b"])

        assert '1. "a"\n2. "b"' in prompt
        assert "formality_level" in prompt
