"""
Configuration management for ConflictGuard.

Loads settings from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ==========================================================================
    # LLM API Keys
    # ==========================================================================
    anthropic_api_key: str = Field(default="", description="Anthropic API key for Claude")
    openai_api_key: str = Field(default="", description="OpenAI (or compatible) API key")
    openai_base_url: str | None = Field(
        default=None,
        description="Base URL for an OpenAI-compatible gateway, e.g. https://openrouter.ai/api/v1",
    )

    # ==========================================================================
    # LLM Configuration
    # ==========================================================================
    primary_llm_model: str = "claude-sonnet-4-20250514"
    primary_llm_provider: Literal["anthropic", "openai"] = "anthropic"
    fallback_llm_model: str = "gpt-4o"
    fallback_llm_provider: Literal["anthropic", "openai"] = "openai"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 2000
    llm_timeout: int = 120
    llm_max_retries: int = 3

    # Suggested client back-off when the reasoning model is unreachable
    ai_retry_after_seconds: int = 30

    # ==========================================================================
    # Graph Store
    # ==========================================================================
    graph_backend: Literal["neo4j", "memory"] = "neo4j"
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "conflictguard_dev_password"
    neo4j_database: str = "neo4j"

    # ==========================================================================
    # API Configuration
    # ==========================================================================
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # ==========================================================================
    # Input Limits
    # ==========================================================================
    max_document_name_length: int = 255
    max_document_content_length: int = 100_000
    max_documents_for_analysis: int = 10


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
