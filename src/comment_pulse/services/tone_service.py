# src/comment_pulse/services/tone_service.py
"""
Tone Analysis Service
Learns a creator's reply style from their past replies
"""

from typing import List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from comment_pulse.app.config import Config
from comment_pulse.domain.interfaces import StructuredChatService
from comment_pulse.domain.models import ToneProfile
from comment_pulse.services.base_service import BaseService
from comment_pulse.services.exceptions import (
    ConfigurationError,
    LLMServiceError,
    ServiceError,
    ValidationError,
)

# Keeps prompt size bounded
MAX_SAMPLE_REPLIES = 50

TONE_SYSTEM_PROMPT = (
    "You are an expert at analyzing writing styles and extracting tone patterns "
    "from text. Return ONLY a JSON object."
)

TONE_PROFILE_SHAPE = (
    '{"tone": str, '
    '"formality_level": "very_casual|casual|neutral|formal", '
    '"emoji_usage": "never|rarely|sometimes|frequently", '
    '"common_emojis": [str], '
    '"avg_reply_length": "short|medium|long", '
    '"common_phrases": [str], '
    '"uses_name": bool, "asks_questions": bool, "uses_commenter_name": bool}'
)


def build_tone_prompt(replies: Sequence[str]) -> str:
    numbered = "\n".join(f'{i}. "{reply}"' for i, reply in enumerate(replies, start=1))
    return (
        f"Below are {len(replies)} past replies a YouTube creator wrote to comments "
        "on their videos.\n\n"
        "Extract their writing style:\n"
        "1. Overall tone (e.g. casual, professional, enthusiastic, friendly, witty)\n"
        "2. Formality level\n"
        "3. How often they use emojis\n"
        "4. Up to 5 emojis they use most\n"
        "5. Average reply length (short <50 chars, medium 50-150, long >150)\n"
        "6. Common phrases or expressions\n"
        "7. Whether they sign their name at the end\n"
        "8. Whether they ask follow-up questions\n"
        "9. Whether they address commenters by name\n\n"
        f"Replies:\n{numbered}\n\n"
        f"Answer with a JSON object shaped like {TONE_PROFILE_SHAPE}."
    )


class ToneService(BaseService):
    """
    Tone profile extraction

    Unlike reply drafting there is no template to fall back to, so
    failures are raised to the caller.
    """

    def __init__(
        self,
        chat: Optional[StructuredChatService] = None,
        config: Optional[Config] = None,
    ):
        super().__init__(config=config)
        self.chat = chat

    def get_service_name(self) -> str:
        return "tone"

    async def analyze_tone(self, replies: Sequence[str]) -> ToneProfile:
        """
        Build a tone profile from a creator's past replies

        Args:
            replies: Reply texts, most representative first (blank ones are skipped)

        Returns:
            Validated ToneProfile

        Raises:
            ValidationError: No non-blank replies given
            ConfigurationError: No chat service available
            LLMServiceError: Request failed or the profile did not validate
        """
        self.validate_required(replies, "replies")
        if isinstance(replies, str):
            raise ValidationError("replies", "must be a list of reply texts")
        sample: List[str] = [
            r.strip() for r in replies if isinstance(r, str) and r.strip()
        ][:MAX_SAMPLE_REPLIES]
        self.validate_required(sample, "replies")

        if self.chat is None:
            raise ConfigurationError("chat", "no chat service configured for tone analysis")

        self.log_info(f"Analyzing tone from {len(sample)} replies")
        try:
            data = await self.chat.chat_json(TONE_SYSTEM_PROMPT, build_tone_prompt(sample))
        except ServiceError as e:
            self.log_error(f"Tone analysis request failed: {e}")
            raise

        try:
            profile = ToneProfile.model_validate(data)
        except PydanticValidationError as e:
            self.log_error("Tone profile failed validation", e)
            raise LLMServiceError("tone profile failed validation") from e

        self.log_info(f"✅ Tone profile: {profile.tone}, {profile.formality_level}")
        return profile


async def analyze_tone(
    replies: Sequence[str],
    *,
    chat: Optional[StructuredChatService],
    config: Optional[Config] = None,
) -> ToneProfile:
    """Analyze tone with an explicitly supplied chat service"""
    return await ToneService(chat=chat, config=config).analyze_tone(replies)
