"""Configuration utilities for the TTS gateway service."""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_SUPPORTED_LANGUAGES = ["en-US"]


class Settings(BaseSettings):
    """Deployment settings loaded from environment variables.

    The upstream credential is not a setting. It is read per request
    through a :class:`~tts_gateway.credentials.CredentialProvider`.
    """

    allowed_origin: str = Field(
        default="tts.pulseonix.xyz",
        alias="TTS_GATEWAY_ALLOWED_ORIGIN",
        description="Value sent in Access-Control-Allow-Origin.",
    )
    supported_languages: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_SUPPORTED_LANGUAGES),
        alias="TTS_GATEWAY_SUPPORTED_LANGUAGES",
        description="Comma separated list of accepted locale tags.",
    )
    max_text_length: int = Field(
        default=5000,
        ge=1,
        alias="TTS_GATEWAY_MAX_TEXT_LENGTH",
        description="Maximum number of characters accepted in a request.",
    )
    upstream_url: str = Field(
        default="https://texttospeech.googleapis.com/v1/text:synthesize",
        alias="TTS_GATEWAY_UPSTREAM_URL",
    )
    audio_encoding: str = Field(
        default="MP3",
        alias="TTS_GATEWAY_AUDIO_ENCODING",
        description="Audio encoding requested from the upstream for every call.",
    )
    upstream_timeout: float = Field(
        default=10.0,
        gt=0,
        alias="TTS_GATEWAY_UPSTREAM_TIMEOUT",
        description="Seconds to wait for the upstream before giving up.",
    )
    credential_env_var: str = Field(
        default="GOOGLE_TTS_API_KEY",
        alias="TTS_GATEWAY_CREDENTIAL_ENV_VAR",
        description="Environment variable holding the upstream API key.",
    )
    service_name: str = Field(
        default="simple-tts-gateway",
        alias="TTS_GATEWAY_SERVICE_NAME",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("supported_languages", mode="before")
    @classmethod
    def _split_languages(cls, value: str | List[str]) -> List[str]:
        if isinstance(value, str):
            parts = [language.strip() for language in value.split(",")]
            languages = [language for language in parts if language]
            return languages or list(DEFAULT_SUPPORTED_LANGUAGES)
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the gateway settings."""

    return Settings()
