# src/comment_pulse/infrastructure/clients/__init__.py
"""API Clients"""

from .openai_client import OpenAIClient, create_openai_client
from .rate_limiter import ConcurrencyLimiter, limiter_for_tier, jitter_delay

__all__ = [
    "OpenAIClient",
    "create_openai_client",
    "ConcurrencyLimiter",
    "limiter_for_tier",
    "jitter_delay",
]
