# src/comment_pulse/services/exceptions.py
"""
Service Exceptions
Error taxonomy shared by the classification pipeline and its collaborators
"""

import random
from typing import Any, Dict, Optional


# ============================================================================
# Base Exception
# ============================================================================


class ServiceError(Exception):
    """Base class for all service-layer errors"""

    def __init__(
        self,
        message: str,
        code: str = "service_error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(ServiceError):
    """Top-level request is invalid (fail fast)"""

    def __init__(self, field: str, message: str):
        super().__init__(
            f"Invalid {field}: {message}",
            code="validation_error",
            details={"field": field},
        )
        self.field = field


# ============================================================================
# External Service Errors
# ============================================================================


class ExternalServiceError(ServiceError):
    """A remote collaborator failed"""

    def __init__(
        self, service: str, message: str, status_code: Optional[int] = None
    ):
        super().__init__(
            f"{service} error: {message}",
            code="external_service_error",
            details={"service": service, "status_code": status_code},
        )
        self.service = service
        self.status_code = status_code


class LLMServiceError(ExternalServiceError):
    """OpenAI-compatible endpoint failed or returned unusable content"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__("openai", message, status_code)


class RateLimitExceededError(ExternalServiceError):
    """Remote service answered 429 after all attempts"""

    def __init__(self, service: str, retry_after: Optional[float] = None):
        super().__init__(service, "rate limit exceeded", status_code=429)
        self.retry_after = retry_after


# ============================================================================
# Storage Errors
# ============================================================================


class CacheStoreError(ServiceError):
    """Sentiment cache store is unreachable or rejected an operation"""

    def __init__(self, operation: str, message: str):
        super().__init__(
            f"Cache {operation} failed: {message}",
            code="cache_store_error",
            details={"operation": operation},
        )
        self.operation = operation


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(ServiceError):
    """Missing credentials or invalid settings"""

    def __init__(self, setting: str, message: str):
        super().__init__(
            f"Configuration error for {setting}: {message}",
            code="configuration_error",
            details={"setting": setting},
        )
        self.setting = setting


# ============================================================================
# Utility Functions
# ============================================================================


def is_retryable_error(error: BaseException) -> bool:
    """Whether a failed external call is worth another attempt"""
    if isinstance(error, RateLimitExceededError):
        return True
    if isinstance(error, ExternalServiceError):
        return error.status_code is None or error.status_code >= 500
    return False


def get_retry_delay(
    attempt: int, min_ms: int = 100, max_ms: int = 300
) -> float:
    """
    Randomized delay before the next attempt, in seconds

    Args:
        attempt: Zero-based attempt number that just failed
        min_ms: Lower bound of the jitter window
        max_ms: Upper bound of the jitter window

    Returns:
        Delay in seconds
    """
    jitter_ms = random.randint(min_ms, max(min_ms, max_ms))
    return (jitter_ms * (attempt + 1)) / 1000.0
