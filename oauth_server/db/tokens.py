"""Access token store."""

from __future__ import annotations

from functools import lru_cache
from typing import Protocol
from uuid import UUID

from oauth_server.db.base import InMemoryTable
from oauth_server.models.token import AccessToken


class TokenStore(Protocol):
    """Persistence contract for issued access tokens."""

    async def save(self, token: AccessToken) -> None: ...

    async def get(self, token_id: UUID) -> AccessToken | None: ...


class InMemoryTokenStore:
    """Process-local access token store."""

    def __init__(self) -> None:
        self._table: InMemoryTable[UUID, AccessToken] = InMemoryTable(key=lambda token: token.id)

    async def save(self, token: AccessToken) -> None:
        """Persist an issued token."""
        await self._table.put(token)

    async def get(self, token_id: UUID) -> AccessToken | None:
        """Fetch an issued token by ID."""
        return await self._table.get(token_id)


@lru_cache
def get_token_store() -> InMemoryTokenStore:
    """Create and cache the shared access token store."""
    return InMemoryTokenStore()
