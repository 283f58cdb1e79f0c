"""Typed application settings for the weather widget runtime."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import AnyHttpUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

# Upper bound for the single upstream request, in seconds.
MAX_WEATHER_TIMEOUT_SECONDS = 5.0

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    cache_dir: Path = Field(
        default=Path("./media/mod_prettyweather"),
        alias="PRETTYWEATHER_CACHE_DIR",
    )
    widgets_file: Path = Field(
        default=Path("./widgets.json"),
        alias="PRETTYWEATHER_WIDGETS_FILE",
    )
    openweathermap_base_url: AnyHttpUrl = Field(
        default="https://api.openweathermap.org/data/2.5/weather",
        alias="OPENWEATHERMAP_BASE_URL",
        validate_default=True,
    )
    weather_timeout_seconds: float = Field(
        default=MAX_WEATHER_TIMEOUT_SECONDS,
        alias="WEATHER_TIMEOUT_SECONDS",
    )
    weather_user_agent: str = Field(default="pretty-weather/0.1", alias="WEATHER_USER_AGENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_limits(self) -> Settings:
        """Validate numeric limits and free-text fields."""
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")
        if self.weather_timeout_seconds > MAX_WEATHER_TIMEOUT_SECONDS:
            raise ValueError(
                f"WEATHER_TIMEOUT_SECONDS cannot exceed {MAX_WEATHER_TIMEOUT_SECONDS:g}."
            )
        if not self.weather_user_agent.strip():
            raise ValueError("WEATHER_USER_AGENT must not be empty.")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging (no credentials)."""
        return {
            "app_env": self.app_env,
            "cache_dir": str(self.cache_dir),
            "widgets_file": str(self.widgets_file),
            "base_url": str(self.openweathermap_base_url),
            "timeout_seconds": self.weather_timeout_seconds,
            "log_level": self.log_level,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
