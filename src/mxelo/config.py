"""
Configuration management for mxelo.

Uses Pydantic Settings to load configuration from environment variables
with sensible defaults. Every rating option can be overridden with an
``MXELO_``-prefixed environment variable or a .env file, which is how the
command-line script picks up its defaults.

Usage:
    from mxelo.config import settings
    print(settings.standard_k)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can be set directly or via a .env file
    in the project root directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MXELO_",
        case_sensitive=False,
    )

    # ==========================================================================
    # Rating Engine Defaults
    # ==========================================================================

    base_rating: int = Field(
        default=1500,
        description="Starting rating for riders with no history",
    )
    standard_k: float = Field(
        default=32.0,
        description="K-factor for established riders",
    )
    provisional_k: float = Field(
        default=80.0,
        description="Elevated K-factor used during a rider's provisional period",
    )
    provisional_races: int = Field(
        default=15,
        description="History length (debut included) that still counts as provisional",
    )
    bootstrap_new_entrants: bool = Field(
        default=False,
        description="Seed new riders from the ratings of established riders they finished near",
    )

    # Mulligan (loss dampening for established leaders)
    mulligan_enabled: bool = Field(
        default=False,
        description="Halve an elite rider's loss K on a bottom-quartile finish",
    )
    mulligan_cap: int = Field(
        default=3,
        description="Maximum number of dampened pairwise losses per rider",
    )

    # Season churn decay
    churn_decay_enabled: bool = Field(
        default=False,
        description="Regress ratings toward the pool mean at each year boundary",
    )
    decay_offset: float = Field(
        default=0.0,
        description="Added to the measured retention rate before clamping (-1.0 to 1.0)",
    )

    # ==========================================================================
    # Logging Configuration
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v

    @field_validator("decay_offset")
    @classmethod
    def validate_decay_offset(cls, v: float) -> float:
        if v < -1.0 or v > 1.0:
            raise ValueError("decay_offset must be between -1.0 and 1.0")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only load settings once,
    which is important because loading from .env can be slow.
    """
    return Settings()


# Convenience alias for importing
settings = get_settings()
