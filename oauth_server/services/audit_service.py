"""Structured audit events for client authentication and token issuance."""

from __future__ import annotations

import ipaddress
from functools import lru_cache
from typing import Any

import structlog
from fastapi import Request

logger = structlog.get_logger(__name__)

_REDACTED = "***REDACTED***"
_SENSITIVE_KEY_PARTS = (
    "authorization",
    "cookie",
    "password",
    "secret",
    "token",
)


def _is_sensitive_key(key: str) -> bool:
    """Return True when metadata key likely contains credential material."""
    normalized = key.strip().lower().replace("-", "_")
    return any(part in normalized for part in _SENSITIVE_KEY_PARTS)


def _coerce_ip(value: str | None) -> str | None:
    """Normalize IP address strings to canonical values."""
    if not value:
        return None
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return None


def _extract_client_ip(request: Request) -> str | None:
    """Extract canonical client IP from forwarding headers or peer address."""
    forwarded_for = request.headers.get("x-forwarded-for", "").strip()
    if forwarded_for:
        parsed = _coerce_ip(forwarded_for.split(",")[0].strip())
        if parsed is not None:
            return parsed

    client = request.client
    if client is None:
        return None
    return _coerce_ip(client.host)


def _extract_correlation_id(request: Request) -> str:
    """Resolve the request correlation ID."""
    return str(
        getattr(request.state, "correlation_id", None)
        or request.headers.get("x-correlation-id", "unknown")
    )


def _sanitize_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Redact credential-bearing keys and coerce values to JSON-safe primitives."""
    sanitized: dict[str, Any] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if _is_sensitive_key(key):
            sanitized[key] = _REDACTED
        elif isinstance(value, bool | int | float | str):
            sanitized[key] = value
        elif isinstance(value, list | tuple | set | frozenset):
            sanitized[key] = sorted(str(item) for item in value)
        else:
            sanitized[key] = str(value)
    return sanitized


class AuditService:
    """Emit audit events as structured logs without affecting request outcomes."""

    def emit(
        self,
        request: Request,
        event_type: str,
        success: bool,
        client_id: str | None = None,
        failure_reason: str | None = None,
        **metadata: Any,
    ) -> None:
        """Emit one audit event for the current request."""
        event_logger = logger.info if success else logger.warning
        event_logger(
            event_type,
            event_type=event_type,
            success=success,
            client_id=client_id,
            failure_reason=failure_reason,
            correlation_id=_extract_correlation_id(request),
            ip_address=_extract_client_ip(request),
            user_agent=request.headers.get("user-agent"),
            metadata=_sanitize_metadata(metadata),
        )

    def log_client_authentication(
        self,
        request: Request,
        channel: str,
        success: bool,
        client_id: str | None = None,
        failure_reason: str | None = None,
    ) -> None:
        """Record the outcome of the request authentication stage."""
        self.emit(
            request,
            "client.authentication",
            success,
            client_id=client_id,
            failure_reason=failure_reason,
            channel=channel,
        )

    def log_token_exchange(
        self,
        request: Request,
        client_id: str,
        grant_type: str | None,
        success: bool,
        error_code: str | None = None,
    ) -> None:
        """Record the outcome of a token exchange for an authenticated client."""
        self.emit(
            request,
            "token.exchange",
            success,
            client_id=client_id,
            failure_reason=error_code,
            grant_type=grant_type,
        )

    def log_token_introspection(self, request: Request, client_id: str, active: bool) -> None:
        """Record an introspection lookup."""
        self.emit(request, "token.introspection", True, client_id=client_id, active=active)


@lru_cache
def get_audit_service() -> AuditService:
    """Create and cache audit service dependency."""
    return AuditService()
