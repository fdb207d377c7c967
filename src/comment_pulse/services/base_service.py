# src/comment_pulse/services/base_service.py
"""
Base Service
Shared logging and validation helpers for service classes
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from comment_pulse.app.config import Config, get_config
from comment_pulse.services.exceptions import ValidationError


class BaseService(ABC):
    """
    Base class for business-logic services

    Subclasses name themselves via get_service_name(); log lines are
    prefixed with that name.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()
        self.logger = logging.getLogger(f"comment_pulse.services.{self.get_service_name()}")

    @abstractmethod
    def get_service_name(self) -> str:
        """Short service identifier used in logs"""

    # ========================================================================
    # Logging Helpers
    # ========================================================================

    def log_debug(self, message: str) -> None:
        self.logger.debug(f"[{self.get_service_name()}] {message}")

    def log_info(self, message: str) -> None:
        self.logger.info(f"[{self.get_service_name()}] {message}")

    def log_warning(self, message: str) -> None:
        self.logger.warning(f"[{self.get_service_name()}] ⚠️ {message}")

    def log_error(self, message: str, exc: Optional[BaseException] = None) -> None:
        self.logger.error(f"[{self.get_service_name()}] ❌ {message}", exc_info=exc)

    # ========================================================================
    # Validation Helpers
    # ========================================================================

    def validate_required(self, value: Any, field_name: str) -> None:
        """
        Raise ValidationError for None, blank strings and empty collections

        Args:
            value: Value to check
            field_name: Name reported in the error
        """
        if value is None:
            raise ValidationError(field_name, "is required")
        if isinstance(value, str) and not value.strip():
            raise ValidationError(field_name, "must not be empty")
        if isinstance(value, (list, tuple, set, dict)) and not value:
            raise ValidationError(field_name, "must not be empty")
