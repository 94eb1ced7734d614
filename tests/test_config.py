"""Tests for environment-driven configuration."""

import pytest

from shared.llm_adapter import ModelType
from services.tutor_service.config import DEFAULT_ALLOWED_ORIGINS, TutorConfig

_ENV_VARS = (
    "AI_PROVIDER",
    "AI_MAX_RETRIES",
    "AI_RETRY_BASE_DELAY_MS",
    "ALLOWED_ORIGINS",
    "APP_ENV",
    "NODE_ENV",
    "DOUBT_RESOLUTION_MODEL",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestTutorConfig:

    def test_defaults(self):
        cfg = TutorConfig.from_env()
        assert cfg.default_model is ModelType.LLAMA
        assert cfg.max_retries == 2
        assert cfg.retry_base_delay_s == 1.0
        assert cfg.allowed_origins == DEFAULT_ALLOWED_ORIGINS
        assert cfg.app_env == "production"
        assert cfg.expose_error_detail is False
        assert cfg.providers.ai_provider == "openrouter"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("AI_MAX_RETRIES", "4")
        monkeypatch.setenv("AI_RETRY_BASE_DELAY_MS", "250")
        monkeypatch.setenv("ALLOWED_ORIGINS", "https://tutor.example.com, https://admin.example.com")
        monkeypatch.setenv("DOUBT_RESOLUTION_MODEL", "Mistral")
        monkeypatch.setenv("APP_ENV", "Development")
        cfg = TutorConfig.from_env()
        assert cfg.max_retries == 4
        assert cfg.retry_base_delay_s == 0.25
        assert cfg.allowed_origins == ("https://tutor.example.com", "https://admin.example.com")
        assert cfg.default_model is ModelType.MISTRAL
        assert cfg.expose_error_detail is True

    def test_node_env_is_honoured(self, monkeypatch):
        monkeypatch.setenv("NODE_ENV", "development")
        assert TutorConfig.from_env().expose_error_detail is True

    def test_invalid_numbers_fall_back(self, monkeypatch):
        monkeypatch.setenv("AI_MAX_RETRIES", "many")
        monkeypatch.setenv("AI_RETRY_BASE_DELAY_MS", "-5")
        cfg = TutorConfig.from_env()
        assert cfg.max_retries == 2
        assert cfg.retry_base_delay_ms == 0

    def test_blank_origin_list_uses_defaults(self, monkeypatch):
        monkeypatch.setenv("ALLOWED_ORIGINS", " , ")
        assert TutorConfig.from_env().allowed_origins == DEFAULT_ALLOWED_ORIGINS

    def test_unknown_default_model_is_llama(self, monkeypatch):
        monkeypatch.setenv("DOUBT_RESOLUTION_MODEL", "gpt")
        assert TutorConfig.from_env().default_model is ModelType.LLAMA
