"""
LiveQA server configuration.
Reads ``LIVEQA_*`` environment variables (or a .env file) via pydantic-settings.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from liveqa_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT


class Settings(BaseSettings):
    """Runtime settings for the API server."""

    model_config = SettingsConfigDict(
        env_prefix="LIVEQA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Server ──
    HOST: str = DEFAULT_HOST
    PORT: int = DEFAULT_PORT
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # ── Storage ──
    # Events live in memory only when no path is configured.
    STORE_PATH: Path | None = None

    # ── Moderation ──
    BLOCKED_TERMS: list[str] = []


def load_settings() -> Settings:
    return Settings()
