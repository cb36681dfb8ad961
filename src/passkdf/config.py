"""
config.py - Environment-driven settings for the CLI via pydantic-settings.

Only presentation choices live here (default algorithm, logging). KDF cost
parameters are fixed in registry.py and cannot be configured.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import registry


class Settings(BaseSettings):
    """Settings read from PASSKDF_* environment variables or a .env file."""

    model_config = SettingsConfigDict(env_prefix="PASSKDF_", env_file=".env", case_sensitive=False, extra="ignore")

    default_algorithm: str = registry.Algorithm.SCRYPT.value

    log_level: str = "WARNING"
    log_format: str = "text"

    @field_validator("default_algorithm")
    @classmethod
    def known_algorithm(cls, v: str) -> str:
        if v not in registry.names():
            raise ValueError(f"unsupported algorithm '{v}', expected one of {', '.join(registry.names())}")
        return v

    @field_validator("log_format")
    @classmethod
    def known_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "json"):
            raise ValueError("log_format must be 'text' or 'json'")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
