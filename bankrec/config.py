"""
Configuration management using Pydantic Settings.
All parameters are loaded from environment variables with sensible defaults.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_env: str = Field(default="development")
    app_log_level: str = Field(default="INFO")

    # Tolerance Parameters (currency units / days)
    default_amount_tolerance: float = Field(default=0.01)
    max_amount_tolerance: float = Field(default=100.00)
    default_date_tolerance_days: int = Field(default=2)

    # Working set cap per auto-reconcile run
    scan_limit: int = Field(default=100)

    # Manual links with |difference| above this are divergent
    divergence_threshold: float = Field(default=0.01)

    # Descriptive scoring
    text_similarity_threshold: float = Field(default=0.6)

    # Storage
    reports_dir: Path = Field(default=Path("./data/reports"))

    @property
    def max_amount_tolerance_cents(self) -> int:
        return int(round(self.max_amount_tolerance * 100))

    @property
    def divergence_threshold_cents(self) -> int:
        return int(round(self.divergence_threshold * 100))

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
