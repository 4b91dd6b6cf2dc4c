"""
Configuration management for Shaft Miner.
Uses pydantic-settings for environment variable parsing.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables (SHAFT_MINER_*)."""

    # Simulation
    tick_rate_hz: int = Field(
        default=60,
        gt=0,
        description="Game updates per second"
    )
    world_seed: Optional[int] = Field(
        default=None,
        description="Seed for world generation. Unset means a random world"
    )

    # Persistence
    save_path: str = Field(
        default="shaft_miner_save.json",
        description="JSON file holding saved games"
    )
    save_slot: str = Field(
        default="default",
        description="Key of the saved game to load and autosave into"
    )
    autosave_interval_seconds: int = Field(
        default=30,
        ge=0,
        description="Seconds between autosaves. 0 disables autosave"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    # Display
    cell_size: int = Field(
        default=24,
        gt=0,
        description="Pixel size of one grid cell"
    )
    view_rows: int = Field(
        default=20,
        gt=0,
        description="Grid rows visible on screen"
    )

    class Config:
        env_prefix = "SHAFT_MINER_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
