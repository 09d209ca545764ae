"""Engine configuration."""

from interview_engine.config.settings import (
    ConfigError,
    EngineConfig,
    LLMSettings,
    PersistenceSettings,
    RateLimitConfig,
    TimingSettings,
    TranscriptionSettings,
    VoiceSettings,
    load_engine_config,
)

__all__ = [
    "ConfigError",
    "EngineConfig",
    "LLMSettings",
    "PersistenceSettings",
    "RateLimitConfig",
    "TimingSettings",
    "TranscriptionSettings",
    "VoiceSettings",
    "load_engine_config",
]
