"""Application configuration for the signaling service."""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

APP_NAME = "watchparty-signaling"
APP_VERSION = "0.1.0"


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001, ge=1, le=65535)
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["*"],
        validation_alias=AliasChoices("cors_allow_origins", "origin"),
    )

    ssl_cert_file: str | None = Field(default=None)
    ssl_key_file: str | None = Field(default=None)

    log_level: str = Field(default="INFO")

    # Per-connection outbound queue bound; 0 means unbounded.
    outbox_max_size: int = Field(default=256, ge=0)
    renotify_on_rejoin: bool = Field(default=False)
    security_headers: bool = Field(default=True)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Allow comma-separated env values for the allowed origins."""

        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @property
    def ssl_enabled(self) -> bool:
        return bool(self.ssl_cert_file and self.ssl_key_file)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
