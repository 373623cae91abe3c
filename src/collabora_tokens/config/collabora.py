"""Collabora integration settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from collabora_tokens.domain.file_token import GUEST_USER

DEFAULT_TOKEN_TIMEOUT_SECONDS = 3600


class CollaboraSettings(BaseSettings):
    """Token lifetime and identity settings for the editor integration."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    token_timeout_seconds: int = Field(
        default=DEFAULT_TOKEN_TIMEOUT_SECONDS,
        alias="COLLABORA_TOKEN_TIMEOUT",
        ge=1,
    )
    guest_user: str = Field(default=GUEST_USER, alias="COLLABORA_GUEST_USER", min_length=1)


def load_collabora_settings() -> CollaboraSettings:
    return CollaboraSettings()


__all__ = ["CollaboraSettings", "DEFAULT_TOKEN_TIMEOUT_SECONDS", "load_collabora_settings"]
