"""Configuration management using Pydantic Settings.

Priority order:
1. Environment variables (highest priority)
2. Google Cloud Secret Manager (for the Gemini API key)
3. .env file (for local development fallback)
"""

import os
from functools import lru_cache
from typing import Any

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_secret_value(key: str) -> str | None:
    """Lazy import to avoid circular dependency."""
    # Only try Secret Manager if we have a project ID
    project_id = os.environ.get("GOOGLE_PROJECT_ID")
    if not project_id:
        return None

    try:
        from src.secret_manager import get_app_secret

        return get_app_secret(key)
    except Exception:
        return None


class Settings(BaseSettings):
    """Application settings with Secret Manager integration.

    Configuration is loaded from:
    1. Environment variables (highest priority)
    2. Secret Manager (for sensitive values)
    3. .env file (local development fallback)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Google Cloud
    google_project_id: str | None = None
    environment: str = "dev"

    # Gemini (bare key or JSON array of keys)
    gemini_api_key: str = ""

    # Model
    llm_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.4  # Chat edits
    consult_temperature: float = 0.7
    generation_temperature: float = 0.6
    llm_thinking_budget: int = 0

    # Generation
    generation_timeout_seconds: float = 180.0
    max_document_chars: int = 20000

    # Browser-side persistence and export
    credential_store_path: str = ".gamegen/credentials.json"
    download_filename: str = "game-giao-duc.html"

    @model_validator(mode="before")
    @classmethod
    def load_secrets_from_secret_manager(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Load secret values from Secret Manager if not already set.

        Environment variables and .env values always win.
        """
        secret_fields = ["gemini_api_key"]

        for field in secret_fields:
            # Skip if already set via env var or .env
            if data.get(field):
                continue

            value = _get_secret_value(field)
            if value:
                data[field] = value

        return data

    @property
    def gemini_api_keys(self) -> list[str]:
        """Configured Gemini keys as a clean list."""
        from src.credentials import parse_credentials

        return parse_credentials(self.gemini_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Default settings instance
settings = get_settings()
