# src/comment_pulse/infrastructure/clients/openai_client.py
"""
OpenAI-Compatible API Client
Batch comment classification, moderation and reply chat completions.

Features:
- Async connection pooling via httpx
- One retry with randomized backoff on 429 / 5xx / network errors
- Per-item validation of batch results with Pydantic (bad items are dropped)
- Moderation and chat calls degrade to neutral answers instead of raising
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from comment_pulse.app.config import LLMSettings, get_config
from comment_pulse.domain.models import (
    Category,
    ClassificationItem,
    ModerationResult,
    SentimentScore,
    ServiceClassification,
)
from comment_pulse.services.exceptions import (
    ConfigurationError,
    LLMServiceError,
    RateLimitExceededError,
    get_retry_delay,
    is_retryable_error,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Response Models (Type-Safe Data Containers)
# ============================================================================


class SentimentPayload(BaseModel):
    """Sentiment triple as returned by the model"""

    positive: float = Field(ge=0.0, le=1.0)
    neutral: float = Field(ge=0.0, le=1.0)
    negative: float = Field(ge=0.0, le=1.0)


class ClassificationPayload(BaseModel):
    """One item of the batch classification response"""

    id: str
    category: Category
    sentiment: SentimentPayload
    topics: List[str] = Field(default_factory=list)
    intent: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    def to_domain(self) -> ServiceClassification:
        return ServiceClassification(
            id=self.id,
            category=self.category,
            sentiment=SentimentScore(
                positive=self.sentiment.positive,
                neutral=self.sentiment.neutral,
                negative=self.sentiment.negative,
            ),
            topics=[t for t in self.topics if t],
            intent=self.intent,
        )


# Moderation category prefix -> domain label
MODERATION_CATEGORY_MAP = {
    "harassment": "harassment",
    "hate": "hate",
    "self-harm": "self-harm",
    "sexual": "sexual",
    "violence": "violence",
}

CLASSIFY_SYSTEM_PROMPT = (
    "You classify YouTube comments. Return ONLY a JSON object of the form "
    '{"results": [{"id": str, "category": "positive|neutral|constructive|negative|spam", '
    '"sentiment": {"positive": float, "neutral": float, "negative": float}, '
    '"topics": [str], "intent": str}]}. '
    "Return exactly one result per input comment, reusing its id. "
    "Sentiment values are between 0 and 1 and should sum to about 1. "
    "Topics are 1-3 short lowercase keywords. Intent is one of "
    "appreciation, critique, suggestion, question, promotion."
)


# ============================================================================
# Main API Client
# ============================================================================


class OpenAIClient:
    """
    OpenAI Chat Completions / Moderations client

    Handles:
    - Batch classification of uncertain comments
    - Optional moderation signal
    - Reply drafting

    Integrates with the LLM settings section of the app config.
    """

    def __init__(
        self,
        settings: Optional[LLMSettings] = None,
        max_prompt_chars: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize client

        Args:
            settings: LLM settings (reads global config if not provided)
            max_prompt_chars: Per-comment truncation inside batch prompts
            transport: Optional httpx transport (tests use MockTransport)
        """
        if settings is None or max_prompt_chars is None:
            config = get_config()
            settings = settings or config.llm
            if max_prompt_chars is None:
                max_prompt_chars = config.pipeline.max_prompt_chars

        self.settings = settings
        self.api_key = settings.api_key
        self.max_prompt_chars = max_prompt_chars

        self.client = httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            limits=httpx.Limits(max_keepalive_connections=settings.max_parallel),
            transport=transport,
        )

        logger.info(
            f"✅ OpenAI client initialized (key set: {bool(self.api_key)}, "
            f"model: {settings.classify_model})"
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST with retry on 429 / 5xx / network error

        Args:
            path: Endpoint path relative to base_url (e.g. 'chat/completions')
            payload: JSON body

        Returns:
            Parsed JSON response

        Raises:
            RateLimitExceededError: 429 on the final attempt
            LLMServiceError: Other failures
        """
        attempts = self.settings.max_attempts

        for attempt in range(attempts):
            try:
                return await self._post_once(path, payload)
            except (LLMServiceError, RateLimitExceededError) as e:
                if attempt == attempts - 1 or not is_retryable_error(e):
                    raise
                logger.warning(
                    f"⚠️ {path} failed: {e}, retrying (attempt {attempt + 1}/{attempts})"
                )
                await asyncio.sleep(self._retry_delay(attempt))

        raise LLMServiceError(f"{path} failed after {attempts} attempts")

    async def _post_once(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            response = await self.client.post(path, json=payload, headers=headers)
        except httpx.RequestError as e:
            raise LLMServiceError(f"network error: {e}") from e

        status = response.status_code
        if status == 429:
            raise RateLimitExceededError("openai")
        if status >= 500:
            raise LLMServiceError(f"server error on {path}", status_code=status)
        if status >= 400:
            logger.error(f"❌ {path} client error {status}: {response.text[:200]}")
            raise LLMServiceError(f"client error on {path}", status_code=status)

        try:
            return response.json()
        except ValueError as e:
            raise LLMServiceError(f"invalid JSON body from {path}", status_code=status) from e

    def _retry_delay(self, attempt: int) -> float:
        return get_retry_delay(
            attempt,
            self.settings.retry_jitter_min_ms,
            self.settings.retry_jitter_max_ms,
        )

    async def _json_completion(self, model: str, system: str, user: str) -> Any:
        """
        JSON-mode chat completion at low temperature

        Returns:
            Decoded JSON content

        Raises:
            LLMServiceError: Transport failure, empty or non-JSON content
        """
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.2,
        }

        data = await self._post("chat/completions", payload)
        content = _message_content(data)
        if content is None:
            raise LLMServiceError("empty completion response")

        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise LLMServiceError("completion content is not JSON") from e

    # ========================================================================
    # Classification
    # ========================================================================

    def _build_classify_prompt(self, items: Sequence[ClassificationItem]) -> str:
        lines = []
        for item in items:
            text = item.text[: self.max_prompt_chars]
            lines.append(json.dumps({"id": item.id, "text": text}, ensure_ascii=False))
        return f"Classify these {len(items)} comments:\n" + "\n".join(lines)

    async def classify_batch(
        self, items: Sequence[ClassificationItem]
    ) -> List[ServiceClassification]:
        """
        Classify a batch of comments in one chat completion

        Args:
            items: Comments to classify

        Returns:
            Valid per-item results; ids the model skipped or mangled are absent

        Raises:
            ConfigurationError: API key not configured
            LLMServiceError: Transport failure or unparseable content
        """
        if not items:
            return []
        if not self.enabled:
            raise ConfigurationError("OPENAI_API_KEY", "API key not configured")

        parsed = await self._json_completion(
            self.settings.classify_model,
            CLASSIFY_SYSTEM_PROMPT,
            self._build_classify_prompt(items),
        )

        raw_results = parsed.get("results") if isinstance(parsed, dict) else parsed
        if not isinstance(raw_results, list):
            raise LLMServiceError("classification response has no results list")

        requested = {item.id for item in items}
        results: List[ServiceClassification] = []
        for raw in raw_results:
            try:
                payload_item = ClassificationPayload.model_validate(raw)
            except PydanticValidationError as e:
                logger.warning(f"⚠️ Dropping malformed classification item: {e.error_count()} errors")
                continue
            if payload_item.id not in requested:
                continue
            results.append(payload_item.to_domain())

        return results

    # ========================================================================
    # Moderation
    # ========================================================================

    async def moderate(self, text: str) -> ModerationResult:
        """Moderation verdict; never raises, unflagged on any failure"""
        if not self.enabled:
            return ModerationResult()

        try:
            data = await self._post(
                "moderations",
                {"model": self.settings.moderation_model, "input": text},
            )
        except (LLMServiceError, RateLimitExceededError) as e:
            logger.warning(f"⚠️ Moderation unavailable: {e}")
            return ModerationResult()

        results = data.get("results") or []
        if not results:
            return ModerationResult()

        first = results[0]
        scores = first.get("category_scores") or {}
        category = "none"
        if scores:
            top = max(scores.items(), key=lambda kv: kv[1] or 0.0)[0]
            category = MODERATION_CATEGORY_MAP.get(top.split("/")[0], "none")

        return ModerationResult(flagged=bool(first.get("flagged")), category=category)

    # ========================================================================
    # Chat
    # ========================================================================

    async def chat_reply(self, system: str, user: str) -> Optional[str]:
        """Short chat completion; None on any failure or without a key"""
        if not self.enabled:
            logger.warning("⚠️ chat_reply: OPENAI_API_KEY not set, returning None")
            return None

        payload = {
            "model": self.settings.chat_model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": 0.7,
            "max_tokens": 180,
        }

        try:
            data = await self._post("chat/completions", payload)
        except (LLMServiceError, RateLimitExceededError) as e:
            logger.warning(f"⚠️ chat_reply failed: {e}")
            return None

        content = _message_content(data)
        if content and content.strip():
            return content.strip()

        logger.warning("⚠️ chat_reply: empty response")
        return None

    async def chat_json(self, system: str, user: str) -> Dict[str, Any]:
        """
        Structured chat completion returning one JSON object

        Raises:
            ConfigurationError: API key not configured
            LLMServiceError: Transport failure or content that is not a JSON object
        """
        if not self.enabled:
            raise ConfigurationError("OPENAI_API_KEY", "API key not configured")

        parsed = await self._json_completion(self.settings.chat_model, system, user)
        if not isinstance(parsed, dict):
            raise LLMServiceError("chat response is not a JSON object")
        return parsed

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def aclose(self) -> None:
        """Close HTTP connection pool"""
        await self.client.aclose()
        logger.info("🔌 OpenAI client closed")

    async def __aenter__(self) -> "OpenAIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def _message_content(data: Dict[str, Any]) -> Optional[str]:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


# ============================================================================
# Convenience Functions
# ============================================================================


def create_openai_client(settings: Optional[LLMSettings] = None) -> OpenAIClient:
    """
    Factory function to create the OpenAI client

    Args:
        settings: Optional LLM settings (global config if not provided)

    Returns:
        Configured OpenAIClient instance
    """
    return OpenAIClient(settings=settings)
