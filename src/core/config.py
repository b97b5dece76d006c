"""
Application settings management.

Settings are loaded from environment variables with .env file support.
All configuration is validated using Pydantic.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


LLMProvider = Literal["gemini", "anthropic"]

# Provider -> (settings attribute, env var) for the API key it needs
PROVIDER_API_KEYS = {
    "gemini": ("gemini_api_key", "GEMINI_API_KEY"),
    "anthropic": ("anthropic_api_key", "ANTHROPIC_API_KEY"),
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment.

    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # ==========================================================================
    # Paths
    # ==========================================================================

    tasks_file: Path = Field(
        default=Path("config/tasks.yaml"),
        description="YAML task catalog used to pre-seed the tasks table",
    )

    # ==========================================================================
    # Database
    # ==========================================================================

    database_path: Path = Field(
        default=Path("data/study.db"), description="Path to SQLite database file"
    )
    database_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Busy timeout for every store connection",
    )

    # ==========================================================================
    # Study
    # ==========================================================================

    total_tasks: int = Field(
        default=7, ge=1, le=100, description="Number of tasks in the study sequence"
    )

    # ==========================================================================
    # LLM Configuration
    # ==========================================================================
    #
    # Provider defaults (model, endpoint) are defined in src/llm/client.py.
    # Set LLM_MODEL / LLM_BASE_URL only to override them.

    llm_provider: LLMProvider = Field(
        default="gemini", description="Language model provider"
    )
    llm_model: Optional[str] = Field(
        default=None, description="Override the provider's default model"
    )
    llm_base_url: Optional[str] = Field(
        default=None,
        description="Explicit endpoint override for the provider API",
    )
    llm_timeout_seconds: float = Field(
        default=60.0, gt=0, le=600, description="Timeout for a single model call"
    )
    llm_max_tokens: Optional[int] = Field(
        default=None, ge=1, description="Optional cap on completion length"
    )

    # API Keys (required for the provider in use)
    gemini_api_key: Optional[str] = Field(default=None, description="Gemini API key")
    anthropic_api_key: Optional[str] = Field(
        default=None, description="Anthropic API key"
    )

    # ==========================================================================
    # Server Configuration
    # ==========================================================================

    host: str = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    debug: bool = Field(default=False, description="Enable debug mode")

    # ==========================================================================
    # Logging
    # ==========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Minimum level written to console and file"
    )
    log_dir: Path = Field(
        default=Path("logs"), description="Directory for per-run log files"
    )
    log_runs_to_keep: int = Field(
        default=5, ge=1, description="Number of per-run log files to retain"
    )
    log_conversation_text: bool = Field(
        default=False,
        description="Write participant prompts and model responses to logs verbatim",
    )

    def provider_api_key(self, provider: Optional[str] = None) -> Optional[str]:
        """API key configured for a provider (default: the active one)."""
        attr_name, _ = PROVIDER_API_KEYS[provider or self.llm_provider]
        return getattr(self, attr_name)


# Global settings instance
settings = Settings()
