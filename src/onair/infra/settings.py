"""
Application settings for OnAir.

This module defines all configuration settings for OnAir using Pydantic BaseSettings.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings using Pydantic BaseSettings."""

    # Content provider (OpenAI-compatible chat completions)
    deepseek_api_key: str = Field(default="", alias="DEEPSEEK_API_KEY")
    deepseek_base_url: str = Field(default="https://api.deepseek.com/v1", alias="DEEPSEEK_BASE_URL")
    deepseek_model: str = Field(default="deepseek-chat", alias="DEEPSEEK_MODEL")

    # Speech synthesizer
    elevenlabs_api_key: str = Field(default="", alias="ELEVENLABS_API_KEY")
    elevenlabs_base_url: str = Field(default="https://api.elevenlabs.io/v1", alias="ELEVENLABS_BASE_URL")
    elevenlabs_voice_id: str = Field(default="21m00Tcm4TlvDq8ikWAM", alias="ELEVENLABS_VOICE_ID")
    elevenlabs_model_id: str = Field(default="eleven_monolingual_v1", alias="ELEVENLABS_MODEL_ID")
    voice_stability: float = Field(default=0.5, alias="VOICE_STABILITY")
    voice_similarity: float = Field(default=0.75, alias="VOICE_SIMILARITY")

    # Track catalog
    spotify_client_id: str = Field(default="", alias="SPOTIFY_CLIENT_ID")
    spotify_client_secret: str = Field(default="", alias="SPOTIFY_CLIENT_SECRET")
    spotify_api_url: str = Field(default="https://api.spotify.com/v1", alias="SPOTIFY_API_URL")
    spotify_accounts_url: str = Field(
        default="https://accounts.spotify.com/api/token", alias="SPOTIFY_ACCOUNTS_URL"
    )
    token_retry_seconds: float = Field(default=30.0, alias="TOKEN_RETRY_SECONDS")

    # Transport
    http_timeout_seconds: float = Field(default=30.0, alias="HTTP_TIMEOUT_SECONDS")

    # Cycle timing
    talk_window_seconds: float = Field(default=60.0, alias="TALK_WINDOW_SECONDS")
    not_found_retry_seconds: float = Field(default=5.0, alias="NOT_FOUND_RETRY_SECONDS")
    recovery_seconds: float = Field(default=10.0, alias="RECOVERY_SECONDS")
    fallback_track_ms: int = Field(default=30000, alias="FALLBACK_TRACK_MS")

    # Web surface
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=5000, alias="PORT")
    static_dir: str = Field(default="build", alias="STATIC_DIR")
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")  # Comma-separated origins

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    env: str = Field(default="dev", alias="ENV")  # dev|prod|test

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


def _resolve_env_file() -> str | None:
    # 1) Explicit override
    explicit = os.getenv("ONAIR_ENV_FILE")
    if explicit and Path(explicit).is_file():
        return explicit

    # 2) CWD .env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return str(cwd_env)

    # 3) Walk up from this file to find nearest .env
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


# Global settings instance (load from best-effort .env discovery)
_env_file = _resolve_env_file()
settings = Settings(_env_file=_env_file) if _env_file else Settings()  # type: ignore[call-arg]
