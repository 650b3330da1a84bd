"""Client secret store."""

from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache
from typing import Protocol
from uuid import UUID

from oauth_server.config import get_settings
from oauth_server.core.client_secrets import get_client_secret_hasher
from oauth_server.db.base import InMemoryTable
from oauth_server.db.seed import demo_client_secrets
from oauth_server.models.client import ClientId, ClientSecret


class ClientSecretStore(Protocol):
    """Lookup contract for hashed client secrets."""

    async def find_all_by_client_id(self, client_id: str) -> list[ClientSecret]: ...


class InMemoryClientSecretStore:
    """Process-local client secret store keyed by secret ID."""

    def __init__(self, secrets: Iterable[ClientSecret] = ()) -> None:
        self._table: InMemoryTable[UUID, ClientSecret] = InMemoryTable(
            key=lambda secret: secret.id,
            rows=secrets,
        )

    async def find_by_id(self, secret_id: UUID) -> ClientSecret | None:
        """Fetch one secret record by its ID."""
        return await self._table.get(secret_id)

    async def find_all_by_client(self, client_id: ClientId) -> list[ClientSecret]:
        """Fetch every secret on file for a typed client ID."""
        return await self._table.select(lambda secret: secret.client_id == client_id)

    async def find_all_by_client_id(self, client_id: str) -> list[ClientSecret]:
        """Fetch every secret on file for a raw client ID string."""
        return await self._table.select(lambda secret: secret.client_id.value == client_id)

    async def save(self, secret: ClientSecret) -> None:
        """Store a newly provisioned secret."""
        await self._table.put(secret)


@lru_cache
def get_client_secret_store() -> InMemoryClientSecretStore:
    """Create and cache the shared client secret store."""
    if not get_settings().clients.seed_demo_clients:
        return InMemoryClientSecretStore()
    return InMemoryClientSecretStore(demo_client_secrets(get_client_secret_hasher()))
