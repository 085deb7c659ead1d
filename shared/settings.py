"""Centralised application configuration.

Settings are loaded from environment variables or the `.env` file in the
project root. Using pydantic's BaseSettings provides convenient parsing
and type checking. The serverless entrypoint and the HTTP adapter each
build one Settings instance and hand it to the request handler, so the
handler itself never reads the process environment.

Variable names follow the deployed function: ``OPENAI_API_KEY`` (required
at request time), ``ASSISTANT_ID`` (optional) and ``MODEL`` (optional).
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.4
OPENAI_RESPONSES_URL = "https://api.openai.com/v1/responses"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    # OpenAI
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key"),
    )
    assistant_id: str = Field(
        default="", validation_alias=AliasChoices("ASSISTANT_ID", "assistant_id")
    )
    # Empty MODEL falls back to the default as well
    model: str = Field(
        default=DEFAULT_MODEL,
        validation_alias=AliasChoices("MODEL", "OPENAI_MODEL", "model"),
    )
    openai_url: str = Field(
        default=OPENAI_RESPONSES_URL,
        validation_alias=AliasChoices("OPENAI_URL", "openai_url"),
    )
    default_temperature: float = Field(
        default=DEFAULT_TEMPERATURE,
        validation_alias=AliasChoices("DEFAULT_TEMPERATURE", "default_temperature"),
    )

    # HTTP adapter (local runs / containers)
    port: int = Field(default=8000, validation_alias=AliasChoices("PORT", "port"))

    # Logging/observability
    log_level: str = Field(
        default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level")
    )
    langfuse_enabled: bool = Field(False, validation_alias="LANGFUSE_ENABLED")
    langfuse_host: str = Field("", validation_alias="LANGFUSE_HOST")
    langfuse_public_key: str = Field("", validation_alias="LANGFUSE_PUBLIC_KEY")
    langfuse_secret_key: str = Field("", validation_alias="LANGFUSE_SECRET_KEY")
    tracing_backend: str = Field("langfuse", validation_alias="TRACING_BACKEND")
    trace_name: str = Field("assistant-proxy", validation_alias="TRACE_NAME")

    @property
    def resolved_model(self) -> str:
        return self.model or DEFAULT_MODEL
