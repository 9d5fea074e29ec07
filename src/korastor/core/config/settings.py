"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Korastor server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default; there is no auth layer in front of the journey tools.
    korastor_host: str = "127.0.0.1"
    korastor_port: int = 8011
    korastor_log_level: str = "info"
    korastor_allow_insecure_bind: bool = False

    # Storage (on-device state bank)
    db_path: str = "~/.korastor/state.db"
    state_key: str = "korastor_app_state"
    health_systems_key: str = "korastor_health_systems"

    # Encryption of the persisted blob; empty = plain JSON
    encryption_key: str = ""

    # Display
    currency_locale: str = "en-US"

    # Rewards
    points_per_craving: int = 1


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
