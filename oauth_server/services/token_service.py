"""Token issuance service."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from uuid import UUID, uuid4

import structlog

from oauth_server.config import get_settings
from oauth_server.core.scopes import format_scopes
from oauth_server.db.tokens import TokenStore, get_token_store
from oauth_server.models.token import AccessToken
from oauth_server.services.password_grant_service import PasswordGrantRequest

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IssuedTokens:
    """Identifiers and metadata for a freshly issued access token."""

    access_token: UUID
    expires_in: int
    refresh_token: UUID | None = None
    scope: str | None = None


class TokenService:
    """Service responsible for minting and persisting access tokens."""

    def __init__(self, token_store: TokenStore, access_token_ttl_seconds: int) -> None:
        self._token_store = token_store
        self._access_token_ttl_seconds = access_token_ttl_seconds

    async def issue_for_password_grant(self, grant: PasswordGrantRequest) -> IssuedTokens:
        """Issue an access token and refresh token identifier for a validated grant."""
        access_token = AccessToken(
            client_id=grant.principal.client_id,
            username=grant.username,
            scopes=grant.scopes,
        )
        await self._token_store.save(access_token)
        logger.info(
            "access_token_issued",
            client_id=str(access_token.client_id),
            scope=format_scopes(grant.scopes) if grant.scopes is not None else None,
        )
        return IssuedTokens(
            access_token=access_token.id,
            expires_in=self._access_token_ttl_seconds,
            refresh_token=uuid4(),
            scope=format_scopes(grant.scopes) if grant.scopes is not None else None,
        )

    async def find_access_token(self, token_id: UUID) -> AccessToken | None:
        """Look up a previously issued access token."""
        return await self._token_store.get(token_id)


@lru_cache
def get_token_service() -> TokenService:
    """Build and cache token service based on application settings."""
    return TokenService(
        token_store=get_token_store(),
        access_token_ttl_seconds=get_settings().token.access_token_ttl_seconds,
    )
