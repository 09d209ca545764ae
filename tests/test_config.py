"""
Tests for engine configuration loading.
"""

from pathlib import Path

import pytest

from interview_engine.config import ConfigError, EngineConfig, load_engine_config
from interview_engine.llm.exceptions import LLMConfigError
from interview_engine.llm.factory import create_llm_client, create_transcription_client
from interview_engine.llm.openai_client import OpenAIClient
from interview_engine.llm.anthropic_client import AnthropicClient

CONFIG_PATH = Path(__file__).parent.parent / "configs" / "engine_config.yaml"


class TestLoadEngineConfig:
    """Tests for load_engine_config."""

    def test_loads_shipped_config(self):
        config = load_engine_config(str(CONFIG_PATH))

        assert config.llm.provider == "openai"
        assert config.llm.rate_limits.requests_per_minute == 10
        assert config.voice.rate == 0.9
        assert config.persistence.max_attempts == 3
        assert config.question_count == 5

    def test_partial_file_uses_defaults(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("llm:\n  provider: anthropic\n  model: claude-sonnet-4-5\n", encoding="utf-8")

        config = load_engine_config(str(path))

        assert config.llm.provider == "anthropic"
        assert config.timing.settle_delay == 0.5
        assert config.persistence.retry_delay_seconds == 2.0

    def test_empty_file_is_all_defaults(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("", encoding="utf-8")
        assert load_engine_config(str(path)) == EngineConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_engine_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("llm: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="YAML"):
            load_engine_config(str(path))

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("llm:\n  rate_limits:\n    requests_per_minute: 0\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_engine_config(str(path))


class TestClientFactory:
    """Tests for creating provider clients from settings."""

    def test_openai_client(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        client = create_llm_client(EngineConfig().llm)

        assert isinstance(client, OpenAIClient)
        assert client.model == "gpt-4-turbo-preview"
        assert client.timeout == 30

    def test_anthropic_client(self):
        settings = EngineConfig(
            llm={"provider": "anthropic", "model": "claude-sonnet-4-5", "api_key_env": "ANTHROPIC_API_KEY"}
        ).llm
        client = create_llm_client(settings, api_key="sk-ant-test")
        assert isinstance(client, AnthropicClient)

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(LLMConfigError, match="OPENAI_API_KEY"):
            create_llm_client(EngineConfig().llm)

    def test_transcription_client_optional(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        settings = EngineConfig().transcription

        assert create_transcription_client(settings) is None
        assert create_transcription_client(settings.model_copy(update={"enabled": False}), "k") is None
        assert create_transcription_client(settings, api_key="sk-test") is not None
