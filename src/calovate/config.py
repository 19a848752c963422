"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    offline_mode: bool = False
    local_store_dir: str = ".calovate"
    mirror_enabled: bool = True
    timezone: str = "UTC"
    log_level: str = "INFO"
    notification_buffer_size: int = 50
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="CALOVATE_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def require_remote(self) -> tuple[str, str]:
        """Return the Supabase URL and key, or fail if either is missing."""
        if not self.supabase_url or not self.supabase_anon_key:
            raise ValueError(
                "CALOVATE_SUPABASE_URL and CALOVATE_SUPABASE_ANON_KEY are required "
                "unless offline mode is enabled"
            )
        return self.supabase_url, self.supabase_anon_key
