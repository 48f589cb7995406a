"""Application configuration using Pydantic V2.

All values come from the hosting environment (or an optional ``.env`` file).
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings and configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Gemini
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("gemini_api_key", "api_key"),
        description="Secret credential for the Gemini API",
    )
    gemini_model: str = Field(default="gemini-3-flash-preview", description="Gemini model name")
    gemini_temperature: float = Field(default=0.1, ge=0.0, le=2.0)

    # Fetching
    fetch_max_attempts: int = Field(
        default=1, ge=1, le=5, description="Attempts per refresh (1 disables retry)"
    )

    # Holdings
    ticker: str = Field(default="VTI")
    default_shares: str = Field(default="10", description="Initial share count input")


def get_settings() -> Settings:
    """Read settings from the current environment."""
    return Settings()
