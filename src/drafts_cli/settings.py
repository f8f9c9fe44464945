"""Application settings (env/.env)."""

from __future__ import annotations

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Settings for the AppleScript bridge, the fuzzy selector and the release check."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    osascript_path: str = Field(default="osascript", alias="DRAFTS_OSASCRIPT", min_length=1)
    app_name: str = Field(default="Drafts", alias="DRAFTS_APP_NAME", min_length=1)
    fzf_path: str = Field(default="fzf", alias="DRAFTS_FZF", min_length=1)

    # Unset leaves logging unconfigured: warnings still reach stderr.
    log_level: str | None = Field(default=None, alias="DRAFTS_LOG_LEVEL")

    release_repo: str = Field(
        default="nerveband/drafts-applescript-cli",
        alias="DRAFTS_RELEASE_REPO",
        pattern=r"^[\w.-]+/[\w.-]+$",
    )
    release_api_url: AnyHttpUrl = Field(
        default="https://api.github.com",
        alias="DRAFTS_RELEASE_API_URL",
    )

    http_timeout_seconds: float = Field(
        default=15.0,
        alias="HTTP_TIMEOUT_SECONDS",
        gt=0,
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str | None) -> str | None:
        if value is None:
            return None
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(_LOG_LEVELS)}")
        return level
