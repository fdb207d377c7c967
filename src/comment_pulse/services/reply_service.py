# src/comment_pulse/services/reply_service.py
"""
Reply Service
Drafts short replies to a comment in one or more tones
"""

from typing import Any, List, Optional, Sequence, Tuple

from comment_pulse.app.config import Config
from comment_pulse.domain.interfaces import ChatService
from comment_pulse.domain.models import Comment, GeneratedReply, ToneProfile
from comment_pulse.services.base_service import BaseService

MAX_REPLY_CHARS = 280

REPLY_TEMPLATES = {
    "friendly": "Thanks so much for watching! 😊 I'm really glad you found it helpful!",
    "concise": "Thanks for watching!",
    "enthusiastic": "WOW! Thank you so much!! 🎉 Your support means the world to me!",
}
DEFAULT_TONE = "friendly"


def build_prompts(
    comment: Comment, tone: str, profile: Optional[ToneProfile] = None
) -> Tuple[str, str]:
    """
    Build (system, user) prompts for one tone

    Args:
        comment: Comment being answered
        tone: Requested tone ("auto" lets a tone profile decide)
        profile: Creator writing style, if known

    Returns:
        (system prompt, user prompt)
    """
    if profile is None:
        system = (
            "You write very short, channel-safe replies to YouTube comments "
            "in the creator's voice.\n"
            f"- Use exactly this tone: {tone}.\n"
            "- Stay under 220 characters.\n"
            "- No hashtags and no links.\n"
            "- Be kind and assume good faith."
        )
        user = f'Comment:\n"{comment.text}"\n\nWrite one {tone} reply.'
        return system, user

    style = [
        f"- Tone: {profile.tone}",
        f"- Formality: {profile.formality_level}",
        f"- Emoji usage: {profile.emoji_usage}",
    ]
    if profile.common_emojis:
        style.append(f"- Favorite emojis: {', '.join(profile.common_emojis)}")
    style.append(f"- Typical reply length: {profile.avg_reply_length}")
    if profile.common_phrases:
        style.append(f"- Common phrases: {', '.join(profile.common_phrases[:3])}")
    style.append(
        "- Signs replies with their name" if profile.uses_name else "- Does not sign replies"
    )
    style.append(
        "- Often asks follow-up questions"
        if profile.asks_questions
        else "- Rarely asks questions"
    )
    style.append(
        "- Addresses commenters by name"
        if profile.uses_commenter_name
        else "- Does not address commenters by name"
    )

    system = (
        "You reply to YouTube comments in the creator's own voice.\n\n"
        "CREATOR STYLE:\n" + "\n".join(style) + "\n\n"
        "RULES:\n"
        "- Match the tone, formality, emoji frequency and length above\n"
        "- Use their common phrases only where they fit\n"
        "- No hashtags and no links\n"
        "- Be kind and assume good faith"
    )
    tone_clause = f" with a {tone} tone" if tone != "auto" else ""
    user = (
        f"Comment author: {comment.author or 'unknown'}\n"
        f'Comment text: "{comment.text}"\n\n'
        f"Write a reply in the creator's voice{tone_clause}."
    )
    return system, user


class ReplyService(BaseService):
    """
    Reply drafting

    The chat service is optional; without it, or when it fails or
    answers too long, the tone's template is used.
    """

    def __init__(self, chat: Optional[ChatService] = None, config: Optional[Config] = None):
        super().__init__(config=config)
        self.chat = chat

    def get_service_name(self) -> str:
        return "replies"

    async def generate_replies(
        self,
        comment: Any,
        tones: Sequence[str],
        tone_profile: Optional[ToneProfile] = None,
    ) -> List[GeneratedReply]:
        """
        Draft one reply per requested tone

        Args:
            comment: Comment model or mapping
            tones: Requested tones, in output order
            tone_profile: Creator writing style (optional)

        Returns:
            GeneratedReply per tone
        """
        if not isinstance(comment, Comment):
            comment = Comment.model_validate(comment)

        replies: List[GeneratedReply] = []
        for tone in tones:
            system, user = build_prompts(comment, tone, tone_profile)
            drafted = await self._chat(system, user)

            if drafted and len(drafted) <= MAX_REPLY_CHARS:
                reply = drafted
            else:
                reply = REPLY_TEMPLATES.get(tone, REPLY_TEMPLATES[DEFAULT_TONE])
            replies.append(GeneratedReply(tone=tone, reply=reply.strip()))

        self.log_debug(f"Drafted {len(replies)} replies for comment {comment.id}")
        return replies

    async def _chat(self, system: str, user: str) -> Optional[str]:
        if self.chat is None:
            return None
        try:
            return await self.chat.chat_reply(system, user)
        except Exception as e:
            self.log_warning(f"Reply drafting failed, using template: {e}")
            return None
