"""Configuration for openapi-context."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="OPENAPI_CONTEXT_", case_sensitive=False)

    spec_path: str = Field(default="/app/spec")
    log_level: str = Field(default="INFO")

    chunk_size: int = Field(default=2000, gt=0)
    smart_breaks: bool = Field(default=True)

    max_examples: int = Field(default=1, ge=0)
    max_enum_values: int = Field(default=20, gt=0)
    include_descriptions: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
