# src/comment_pulse/app/config.py
"""
Configuration Management for Comment Pulse
Standalone configuration system with environment variable overrides
"""

import yaml
import logging
import threading
from pathlib import Path
from typing import Dict, Any, Optional, Literal
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# ============================================================================
# Core Configuration Classes
# ============================================================================


class LLMSettings(BaseSettings):
    """External classification / chat service settings (OpenAI-compatible)"""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    api_key: str = Field(default="", description="OpenAI API key")
    base_url: str = Field(
        default="https://api.openai.com/v1", description="API base URL"
    )
    classify_model: str = Field(
        default="gpt-4o-mini", description="Model used for batch classification"
    )
    chat_model: str = Field(
        default="gpt-4o-mini", description="Model used for reply drafting"
    )
    moderation_model: str = Field(
        default="omni-moderation-latest", description="Moderation model"
    )

    # Request Settings
    request_timeout: float = Field(
        default=12.0, description="Per-request timeout in seconds"
    )
    max_attempts: int = Field(
        default=2, description="Attempts per request (1 try + retries on 429/5xx)"
    )
    retry_jitter_min_ms: int = Field(
        default=100, description="Minimum sleep between attempts (ms)"
    )
    retry_jitter_max_ms: int = Field(
        default=300, description="Maximum sleep between attempts (ms)"
    )

    # Concurrency
    max_parallel: int = Field(
        default=4, description="In-flight batch ceiling for baseline callers"
    )

    @field_validator("max_attempts", "max_parallel")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Counts must be at least 1"""
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v


class PipelineSettings(BaseSettings):
    """Classification pipeline configuration"""

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    default_batch_size: int = Field(
        default=50, description="Uncertain comments per external batch"
    )
    pro_parallel_multiplier: int = Field(
        default=2, description="Concurrency multiplier for pro callers"
    )

    # Pacing between batch starts
    jitter_base_ms: int = Field(default=30, description="Base inter-batch delay (ms)")
    jitter_variance_ms: int = Field(
        default=70, description="Random variance added to the delay (ms)"
    )
    batch_timeout_seconds: float = Field(
        default=30.0, description="Timeout for a single batch call"
    )

    moderation_enabled: bool = Field(
        default=False, description="Consult the moderation endpoint per comment"
    )
    max_prompt_chars: int = Field(
        default=1000, description="Comment text truncation inside batch prompts"
    )

    @field_validator("default_batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        """Validate batch size"""
        if not 1 <= v <= 100:
            raise ValueError("Batch size must be between 1 and 100")
        return v


class CacheConfig(BaseSettings):
    """Sentiment result cache configuration"""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    enabled: bool = Field(default=True, description="Reuse previous results")
    backend: Literal["database", "memory"] = Field(
        default="database", description="Cache store backend"
    )


class DatabaseConfig(BaseSettings):
    """Database Configuration"""

    model_config = SettingsConfigDict(env_prefix="DB_")

    url: str = Field(
        default="sqlite+aiosqlite:///./comment_pulse.db", description="Database URL"
    )
    echo: bool = Field(default=False, description="Echo SQL queries")
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Max overflow connections")


class LoggingConfig(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file_path: Optional[str] = Field(default=None, description="Log file path")


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Main Application Configuration
    Aggregates all configuration modules with unified access
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize application configuration

        Args:
            config_path: Optional YAML config file path
        """
        self.config_path = config_path or "configs/app.yaml"
        self.yaml_config = self._load_yaml_config()

        self.llm = LLMSettings()
        self.pipeline = PipelineSettings()
        self.cache = CacheConfig()
        self.database = DatabaseConfig()
        self.logging = LoggingConfig()

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load YAML configuration file"""
        config_file = Path(self.config_path)

        if not config_file.exists():
            logger.debug(f"Config file not found: {config_file}, using defaults")
            return {}

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config: {e}")
            return {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot notation key"""
        keys = key.split(".")
        value = self.yaml_config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def to_dict(self) -> Dict[str, Any]:
        """Export full configuration as dictionary (secrets masked)"""
        llm = self.llm.model_dump()
        llm["api_key"] = "***" if self.llm.api_key else ""
        return {
            "llm": llm,
            "pipeline": self.pipeline.model_dump(),
            "cache": self.cache.model_dump(),
            "database": self.database.model_dump(),
            "logging": self.logging.model_dump(),
        }

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration summary"""
        return {
            "app": self.yaml_config.get("app", {}),
            "llm": {
                "api_key_set": bool(self.llm.api_key),
                "classify_model": self.llm.classify_model,
                "max_parallel": self.llm.max_parallel,
            },
            "pipeline": {
                "batch_size": self.pipeline.default_batch_size,
                "pro_multiplier": self.pipeline.pro_parallel_multiplier,
                "moderation_enabled": self.pipeline.moderation_enabled,
            },
            "cache": {
                "enabled": self.cache.enabled,
                "backend": self.cache.backend,
            },
            "database": {
                "url": self.database.url,
            },
        }


# ============================================================================
# Global Configuration Instance (Singleton)
# ============================================================================

_config: Optional[Config] = None
_config_lock = threading.Lock()


@lru_cache()
def get_config(config_path: Optional[str] = None) -> Config:
    """
    Get or create global configuration instance (Thread-safe singleton)

    Args:
        config_path: Optional path to config file

    Returns:
        Config instance
    """
    global _config

    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Config(config_path)
                logger.info("✅ Configuration initialized")

    return _config


def reload_config(config_path: Optional[str] = None) -> Config:
    """Force reload configuration"""
    global _config

    with _config_lock:
        get_config.cache_clear()
        _config = Config(config_path)
        logger.info("🔄 Configuration reloaded")

    return _config


def reset_config() -> None:
    """Reset global configuration (mainly for testing)"""
    global _config

    with _config_lock:
        get_config.cache_clear()
        _config = None


# ============================================================================
# Configuration Validation
# ============================================================================


def validate_config(config: Optional[Config] = None) -> Dict[str, Any]:
    """
    Validate configuration

    Args:
        config: Config instance (uses global if None)

    Returns:
        Validation result with errors and warnings
    """
    if config is None:
        config = get_config()

    errors = []
    warnings = []

    if not config.llm.api_key:
        warnings.append(
            "OpenAI API key not set - uncertain comments will use fallback classifier"
        )

    if config.cache.enabled and config.cache.backend == "database":
        if not config.database.url:
            errors.append("Database URL not configured")

    if config.logging.file_path:
        log_path = Path(config.logging.file_path)
        if not log_path.parent.exists():
            try:
                log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Cannot create log directory: {e}")

    if config.llm.retry_jitter_min_ms > config.llm.retry_jitter_max_ms:
        errors.append("retry_jitter_min_ms must not exceed retry_jitter_max_ms")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


# ============================================================================
# Convenience Functions
# ============================================================================


def setup_logging(config: Optional[Config] = None) -> None:
    """
    Setup logging based on configuration

    Args:
        config: Config instance (uses global if None)
    """
    import logging.handlers

    if config is None:
        config = get_config()

    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(config.logging.format))
    root_logger.addHandler(console_handler)

    if config.logging.file_path:
        log_path = Path(config.logging.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(config.logging.format))
        root_logger.addHandler(file_handler)

    logger.info(f"📝 Logging configured: level={config.logging.level}")
