"""
reqguard.tier0_core.config
───────────────────────────
Typed configuration. Reads from .env → environment
variables. All fields are typed via Pydantic.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReqGuardConfig(BaseSettings):
    """
    Typed reqguard configuration.
    All env vars are prefixed with REQGUARD_ unless overridden.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="REQGUARD_LOG_LEVEL")
    log_format: str = Field(default="json", alias="REQGUARD_LOG_FORMAT")

    # ── Schema engine ─────────────────────────────────────────────────────────
    schema_engine: str = Field(default="pydantic", alias="REQGUARD_SCHEMA_ENGINE")

    # ── Diagnostics ───────────────────────────────────────────────────────────
    error_include_url: bool = Field(default=False, alias="REQGUARD_ERROR_INCLUDE_URL")
    error_include_input: bool = Field(default=True, alias="REQGUARD_ERROR_INCLUDE_INPUT")
    error_include_context: bool = Field(
        default=True, alias="REQGUARD_ERROR_INCLUDE_CONTEXT"
    )

    @field_validator("log_format")
    @classmethod
    def normalize_log_format(cls, v: str) -> str:
        # unknown formats fall back to JSON
        v = v.lower()
        return v if v in {"json", "console"} else "json"


@lru_cache(maxsize=1)
def get_config() -> ReqGuardConfig:
    """
    Return the singleton config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return ReqGuardConfig()


def _reset_config() -> None:
    """For tests — clear the config cache."""
    get_config.cache_clear()


__all__ = ["ReqGuardConfig", "get_config"]
