"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    api_base_url: str
    supabase_url: str
    supabase_anon_key: str
    request_timeout_seconds: float = 30.0
    log_level: str = "INFO"
    session_file: Path = Path.home() / ".pantry_client" / "session.json"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def normalized_base_url(self) -> str:
        """Return the API base URL without a trailing slash."""
        return self.api_base_url.rstrip("/")
