"""Runtime configuration based on environment variables."""

from __future__ import annotations

import codecs
import logging
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class InputSettings(BaseModel):
    encoding: str = Field(default="utf-8", min_length=1)
    max_chars: int | None = Field(
        default=None,
        ge=1,
        description="Reject inputs longer than this many characters; unset means unlimited.",
    )

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            return codecs.lookup(value).name
        except LookupError as exc:
            raise ValueError(f"Unknown encoding: {value}") from exc

    @field_validator("max_chars", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class EstimatorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TOKENEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    input: InputSettings = Field(default_factory=InputSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


@lru_cache
def get_settings() -> EstimatorSettings:
    """Return cached settings instance."""

    return EstimatorSettings()


__all__ = [
    "EstimatorSettings",
    "InputSettings",
    "get_settings",
]
