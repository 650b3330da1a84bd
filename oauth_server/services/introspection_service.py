"""Access token introspection (RFC 7662)."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from uuid import UUID

from oauth_server.core.scopes import format_scopes
from oauth_server.services.token_service import TokenService, get_token_service


@dataclass(frozen=True)
class IntrospectionResult:
    """Introspection outcome; only `active` is set for unknown tokens."""

    active: bool
    client_id: str | None = None
    username: str | None = None
    scope: str | None = None
    token_type: str | None = None


class IntrospectionService:
    """Report whether a presented access token was issued by this server."""

    def __init__(self, token_service: TokenService) -> None:
        self._token_service = token_service

    async def introspect(self, raw_token: str) -> IntrospectionResult:
        """Introspect a raw token value."""
        try:
            token_id = UUID(raw_token.strip())
        except ValueError:
            return IntrospectionResult(active=False)

        token = await self._token_service.find_access_token(token_id)
        if token is None:
            return IntrospectionResult(active=False)
        return IntrospectionResult(
            active=True,
            client_id=str(token.client_id),
            username=token.username,
            scope=format_scopes(token.scopes) if token.scopes is not None else None,
            token_type="bearer",
        )


@lru_cache
def get_introspection_service() -> IntrospectionService:
    """Create and cache the introspection service."""
    return IntrospectionService(token_service=get_token_service())
