"""Application settings and logging configuration."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import lru_cache
from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_CONTEXT: dict[str, str] = {"environment": "development", "service": "oauth-token-service"}


class AppSettings(BaseModel):
    """Application identity and runtime settings."""

    environment: Literal["development", "staging", "production"] = "development"
    service: str = "oauth-token-service"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class TokenSettings(BaseModel):
    """Issued token lifetime settings."""

    access_token_ttl_seconds: int = Field(default=7200, ge=1)


class ScopeSettings(BaseModel):
    """Registry of scope names the server recognises."""

    valid_scopes: list[str] = Field(default_factory=lambda: ["basic", "read", "write"])

    @field_validator("valid_scopes")
    @classmethod
    def validate_scope_names(cls, value: list[str]) -> list[str]:
        """Reject an empty registry and names that cannot appear in a scope string."""
        if not value:
            raise ValueError("scopes.valid_scopes must contain at least one scope.")
        for name in value:
            if not name or name != name.strip() or " " in name:
                raise ValueError(f"scopes.valid_scopes contains an invalid name: {name!r}.")
        return value


class HashingSettings(BaseModel):
    """Argon2 cost parameters for newly hashed client secrets."""

    time_cost: int = Field(default=3, ge=1)
    memory_cost: int = Field(default=65536, ge=8, description="Memory cost in KiB.")
    parallelism: int = Field(default=4, ge=1)


class ClientSettings(BaseModel):
    """Client registry bootstrap settings."""

    seed_demo_clients: bool = True
    realm: str = "oauth"


class Settings(BaseSettings):
    """Root application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    token: TokenSettings = Field(default_factory=TokenSettings)
    scopes: ScopeSettings = Field(default_factory=ScopeSettings)
    hashing: HashingSettings = Field(default_factory=HashingSettings)
    clients: ClientSettings = Field(default_factory=ClientSettings)

    @model_validator(mode="after")
    def validate_demo_client_scopes(self) -> Settings:
        """Demo clients are granted `basic`, so seeding requires it to be registered."""
        if self.clients.seed_demo_clients and "basic" not in self.scopes.valid_scopes:
            raise ValueError(
                "scopes.valid_scopes must include 'basic' when clients.seed_demo_clients is enabled."
            )
        return self


def _standard_log_fields(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Inject required structured logging fields."""
    context_vars = structlog.contextvars.get_contextvars()
    event_dict.setdefault("correlation_id", str(context_vars.get("correlation_id", "unknown")))
    event_dict.setdefault("environment", _LOG_CONTEXT["environment"])
    event_dict.setdefault("service", _LOG_CONTEXT["service"])
    event_dict.setdefault("timestamp", datetime.now(UTC).isoformat())
    return event_dict


def configure_structlog(settings: Settings) -> None:
    """Configure structlog for JSON output with required fields."""
    _LOG_CONTEXT["environment"] = settings.app.environment
    _LOG_CONTEXT["service"] = settings.app.service

    log_level = getattr(logging, settings.app.log_level, logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _standard_log_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Load and cache application settings from environment variables."""
    return Settings()
