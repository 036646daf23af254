"""
Sensor Dashboard - Configuration
All settings loaded from environment variables, with a `.env` fallback.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "dashboard_config.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    app_name: str = "Sensor Dashboard"
    debug: bool = False
    log_level: str = "INFO"

    # Hosted backend (PostgREST). Leaving either empty runs the dashboard in demo mode.
    supabase_url: str = Field(default="", validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL"))
    supabase_anon_key: str = Field(
        default="", validation_alias=AliasChoices("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY")
    )
    request_timeout: float = 10.0

    # Timezone used for chart labels and "today" in the data log
    tz: str = "UTC"

    # Refresh timers (seconds)
    overview_refresh_seconds: float = 30.0
    realtime_interval_seconds: float = 2.0
    subscription_poll_seconds: float = 2.0

    # Sensor channel definitions
    config_path: Path = DEFAULT_CONFIG_PATH

    @property
    def demo_mode(self) -> bool:
        """Demo mode when the backend is not configured."""
        return not (self.supabase_url and self.supabase_anon_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
