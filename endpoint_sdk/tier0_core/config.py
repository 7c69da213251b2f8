"""
endpoint_sdk.tier0_core.config
────────────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic. Concrete clients fall back to
these values when constructed without explicit arguments.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EndpointConfig(BaseSettings):
    """
    Typed SDK configuration. All env vars are prefixed with ENDPOINT_.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ───────────────────────────────────────────────────────────
    environment: str = Field(default="development", alias="ENDPOINT_ENV")

    # ── Transport ─────────────────────────────────────────────────────────────
    base_url: str | None = Field(default=None, alias="ENDPOINT_BASE_URL")
    timeout: float = Field(default=30.0, alias="ENDPOINT_TIMEOUT")
    verify_ssl: bool = Field(default=True, alias="ENDPOINT_VERIFY_SSL")
    follow_redirects: bool = Field(default=False, alias="ENDPOINT_FOLLOW_REDIRECTS")
    user_agent: str = Field(default="endpoint-sdk/0.1.0", alias="ENDPOINT_USER_AGENT")

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="ENDPOINT_LOG_LEVEL")
    log_format: str = Field(default="json", alias="ENDPOINT_LOG_FORMAT")

    @field_validator("environment")
    @classmethod
    def validate_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got {v!r}")
        return v.lower()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in {"json", "console"}:
            raise ValueError(f"log_format must be 'json' or 'console', got {v!r}")
        return v.lower()

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        return self.environment == "test"


@lru_cache(maxsize=1)
def get_config() -> EndpointConfig:
    """
    Return the singleton SDK config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return EndpointConfig()


def _reset_config() -> None:
    """For tests: clear the config cache."""
    get_config.cache_clear()


__sdk_export__ = {
    "exports": ["EndpointConfig", "get_config"],
    "description": "Typed env-layered configuration for clients and logging",
    "tier": "tier0_core",
    "module": "config",
}
