"""Tests for configuration module."""

from pathlib import Path

import pytest


def test_settings_defaults(monkeypatch):
    """Settings have sensible defaults."""
    from src.core.config import Settings

    for var in ("LLM_PROVIDER", "LLM_MODEL", "LLM_BASE_URL", "TOTAL_TASKS", "DATABASE_PATH"):
        monkeypatch.delenv(var, raising=False)

    s = Settings(_env_file=None)

    assert s.llm_provider == "gemini"
    assert s.llm_model is None
    assert s.llm_base_url is None
    assert s.llm_timeout_seconds == 60.0
    assert s.total_tasks == 7
    assert s.database_path == Path("data/study.db")
    assert s.database_timeout_seconds == 5.0
    assert s.tasks_file == Path("config/tasks.yaml")


def test_settings_from_env(monkeypatch):
    """Settings can be overridden via environment variables."""
    monkeypatch.setenv("LLM_PROVIDER", "anthropic")
    monkeypatch.setenv("LLM_BASE_URL", "http://llm.internal:9000/v1")
    monkeypatch.setenv("DATABASE_PATH", "/tmp/other.db")
    monkeypatch.setenv("TOTAL_TASKS", "3")

    from src.core.config import Settings

    s = Settings(_env_file=None)

    assert s.llm_provider == "anthropic"
    assert s.llm_base_url == "http://llm.internal:9000/v1"
    assert s.database_path == Path("/tmp/other.db")
    assert s.total_tasks == 3


def test_settings_validation():
    """Settings validate constraints."""
    from src.core.config import Settings
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        Settings(_env_file=None, llm_provider="openai")

    with pytest.raises(ValidationError):
        Settings(_env_file=None, llm_timeout_seconds=0)

    with pytest.raises(ValidationError):
        Settings(_env_file=None, total_tasks=0)


def test_global_settings_available():
    """Global settings instance is importable."""
    from src.core.config import settings

    assert settings is not None
    assert hasattr(settings, "database_path")


def test_provider_api_key():
    """provider_api_key() reads the key for the active or named provider."""
    from src.core.config import Settings

    s = Settings(_env_file=None, gemini_api_key="g", anthropic_api_key=None)

    assert s.provider_api_key() == "g"
    assert s.provider_api_key("anthropic") is None


def test_logging_defaults(monkeypatch):
    from src.core.config import Settings

    for var in ("LOG_LEVEL", "LOG_DIR", "LOG_RUNS_TO_KEEP", "LOG_CONVERSATION_TEXT"):
        monkeypatch.delenv(var, raising=False)

    s = Settings(_env_file=None)

    assert s.log_level == "INFO"
    assert s.log_dir == Path("logs")
    assert s.log_runs_to_keep == 5
    assert s.log_conversation_text is False
