"""
Configuration loader for the interview engine.

Loads and validates engine_config.yaml using Pydantic models.
"""

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/engine_config.yaml"


class ConfigError(Exception):
    """Exception raised when engine configuration cannot be loaded."""

    pass


class RateLimitConfig(BaseModel):
    """Rate limiting configuration for the shared request queue."""

    requests_per_minute: float = Field(default=10, gt=0)


class LLMSettings(BaseModel):
    """Chat-completion provider settings."""

    provider: Literal["openai", "anthropic"] = "openai"
    model: str = "gpt-4-turbo-preview"
    api_key_env: str = "OPENAI_API_KEY"
    base_url: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, gt=0)
    timeout_seconds: int = Field(default=30, gt=0)
    rate_limits: RateLimitConfig = Field(default_factory=RateLimitConfig)

    def api_key(self) -> str:
        """Read the API key from the configured environment variable."""
        return os.getenv(self.api_key_env, "")


class TranscriptionSettings(BaseModel):
    """Audio transcription provider settings."""

    enabled: bool = True
    model: str = "whisper-1"
    api_key_env: str = "OPENAI_API_KEY"
    timeout_seconds: int = Field(default=60, gt=0)

    def api_key(self) -> str:
        """Read the API key from the configured environment variable."""
        return os.getenv(self.api_key_env, "")


class VoiceSettings(BaseModel):
    """Speech synthesis voice settings."""

    voice: str | None = None
    pitch: float = Field(default=1.0, ge=0.0, le=2.0)
    rate: float = Field(default=0.9, gt=0.0, le=10.0)
    volume: float = Field(default=1.0, ge=0.0, le=1.0)
    lang: str = "en-US"


class TimingSettings(BaseModel):
    """Turn-taking delays, in seconds."""

    question_delay: float = Field(default=0.5, ge=0.0)
    settle_delay: float = Field(default=0.5, ge=0.0)
    end_of_turn_silence: float | None = Field(default=2.0, gt=0.0)


class PersistenceSettings(BaseModel):
    """Session store settings."""

    backend: Literal["memory", "json"] = "json"
    directory: str = "sessions"
    max_attempts: int = Field(default=3, gt=0)
    retry_delay_seconds: float = Field(default=2.0, ge=0.0)


class EngineConfig(BaseModel):
    """Complete engine configuration."""

    llm: LLMSettings = Field(default_factory=LLMSettings)
    transcription: TranscriptionSettings = Field(default_factory=TranscriptionSettings)
    voice: VoiceSettings = Field(default_factory=VoiceSettings)
    timing: TimingSettings = Field(default_factory=TimingSettings)
    persistence: PersistenceSettings = Field(default_factory=PersistenceSettings)
    question_count: int = Field(default=5, gt=0)


def load_engine_config(config_path: str = DEFAULT_CONFIG_PATH) -> EngineConfig:
    """
    Load and validate engine configuration from YAML file.

    Args:
        config_path: Path to engine_config.yaml

    Returns:
        EngineConfig: Validated configuration

    Raises:
        ConfigError: Failed to load or validate configuration
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML: {e}") from e

    try:
        config = EngineConfig(**config_data)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {config_path}: {e}") from e

    logger.info(
        f"Loaded engine config: provider={config.llm.provider}, model={config.llm.model}, "
        f"rate_limit={config.llm.rate_limits.requests_per_minute}/min"
    )

    return config
