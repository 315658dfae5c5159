"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

MATHJS_API_URL = "https://api.mathjs.org/v4/"


class EvaluatorSettings(BaseModel):
    base_url: AnyHttpUrl = Field(
        default=MATHJS_API_URL,
        description="Endpoint receiving GET requests of the form <base>?expr=<expression>.",
    )
    request_timeout_seconds: float = Field(default=15, ge=1, le=60)


class RequestLimitSettings(BaseModel):
    max_requests: int = Field(default=5, ge=1)
    interval_seconds: int = Field(default=10, ge=1)


class BotSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__"
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    telegram_token: SecretStr
    telegram_proxy: str | None = None
    default_language: str = "en"
    admin_telegram_id: int | None = None
    session_idle_ttl_seconds: int = Field(default=3600, ge=60)

    evaluator: EvaluatorSettings = Field(default_factory=EvaluatorSettings)
    request_limit: RequestLimitSettings = Field(default_factory=RequestLimitSettings)


@lru_cache
def get_settings() -> BotSettings:
    """Return cached settings instance."""

    return BotSettings()  # type: ignore[call-arg]


__all__ = [
    "BotSettings",
    "EvaluatorSettings",
    "MATHJS_API_URL",
    "RequestLimitSettings",
    "get_settings",
]
