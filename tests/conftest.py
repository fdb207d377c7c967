# tests/conftest.py
"""
Shared test fixtures
"""

import pytest

from comment_pulse.app.config import (
    CacheConfig,
    Config,
    LLMSettings,
    PipelineSettings,
    reset_config,
)


@pytest.fixture
def app_config(tmp_path):
    """Deterministic configuration: no API key, no pacing delays"""
    config = Config(config_path=str(tmp_path / "missing.yaml"))
    config.llm = LLMSettings(
        api_key="",
        max_parallel=2,
        retry_jitter_min_ms=0,
        retry_jitter_max_ms=0,
    )
    config.pipeline = PipelineSettings(
        default_batch_size=2,
        pro_parallel_multiplier=2,
        jitter_base_ms=0,
        jitter_variance_ms=0,
        batch_timeout_seconds=2.0,
        moderation_enabled=False,
    )
    config.cache = CacheConfig(enabled=True, backend="memory")
    return config


@pytest.fixture(autouse=True)
def _reset_global_config():
    yield
    reset_config()
