"""
Routine Player Configuration
============================
All environment variables in one place. Pydantic Settings validates
types at startup so a bad value fails on boot, not mid-workout.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Loaded from environment variables or a .env file."""

    # --- App settings ---
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:4173"]

    # --- Session settings seed ---
    # A fresh player has nothing stored, so every toggle starts off.
    default_sound_enabled: bool = False
    default_countdown_enabled: bool = False
    default_auto_advance_enabled: bool = False

    # --- Timer ---
    countdown_seconds: int = 3
    tick_interval_seconds: float = 1.0
    # Pause between a step finishing and the automatic move to the next one
    auto_advance_delay_seconds: float = 1.0
    # Seconds-remaining marks that raise a timer warning (3, 2, 1)
    timer_warning_seconds: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
