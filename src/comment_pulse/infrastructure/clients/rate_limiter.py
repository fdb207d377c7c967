# src/comment_pulse/infrastructure/clients/rate_limiter.py
"""
Concurrency Limiting for External Service Calls
Caps the number of simultaneously in-flight requests and spreads request
starts with randomized jitter.

Features:
- Explicit limiter object (one per request or tenant, no module state)
- Callers beyond the ceiling queue instead of failing
- In-flight and peak counters for monitoring and tests
- Tier-aware ceiling (pro callers get a multiplied limit)
"""

import asyncio
import logging
import random
from types import TracebackType
from typing import Optional, Type

from comment_pulse.domain.models import Tier

logger = logging.getLogger(__name__)


# ============================================================================
# Concurrency Limiter
# ============================================================================


class ConcurrencyLimiter:
    """
    Async context manager bounding simultaneous in-flight calls

    Usage:
        limiter = ConcurrencyLimiter(max_in_flight=4)
        async with limiter:
            await client.classify_batch(batch)
    """

    def __init__(self, max_in_flight: int):
        """
        Initialize limiter

        Args:
            max_in_flight: Maximum concurrent holders (>= 1)
        """
        if max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")

        self.max_in_flight = max_in_flight
        self._semaphore = asyncio.Semaphore(max_in_flight)
        self._in_flight = 0
        self._peak = 0
        self._total = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest concurrency observed since creation"""
        return self._peak

    @property
    def total_acquired(self) -> int:
        return self._total

    async def acquire(self) -> None:
        """Wait for a free slot"""
        await self._semaphore.acquire()
        # No await between these updates, so they are atomic on the event loop
        self._in_flight += 1
        self._total += 1
        self._peak = max(self._peak, self._in_flight)

    def release(self) -> None:
        """Return a slot"""
        self._in_flight -= 1
        self._semaphore.release()

    async def __aenter__(self) -> "ConcurrencyLimiter":
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        return (
            f"<ConcurrencyLimiter(max={self.max_in_flight}, "
            f"in_flight={self._in_flight}, peak={self._peak})>"
        )


# ============================================================================
# Helpers
# ============================================================================


def limiter_for_tier(
    tier: Tier, base_limit: int, pro_multiplier: int = 2
) -> ConcurrencyLimiter:
    """
    Build a limiter sized for the caller's tier

    Args:
        tier: Caller tier
        base_limit: Ceiling for baseline callers
        pro_multiplier: Ceiling multiplier for pro callers

    Returns:
        Fresh ConcurrencyLimiter
    """
    limit = base_limit * pro_multiplier if tier == Tier.PRO else base_limit
    logger.debug(f"🕐 Concurrency ceiling for tier={tier.value}: {limit}")
    return ConcurrencyLimiter(max(1, limit))


def jitter_seconds(base_ms: int, variance_ms: int) -> float:
    """Random delay in [base, base + variance) milliseconds, as seconds"""
    variance = random.randrange(variance_ms) if variance_ms > 0 else 0
    return (base_ms + variance) / 1000.0


async def jitter_delay(base_ms: int = 50, variance_ms: int = 100) -> None:
    """Sleep a short random time to avoid synchronized bursts"""
    await asyncio.sleep(jitter_seconds(base_ms, variance_ms))
