"""Client configuration store."""

from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache
from typing import Protocol

from oauth_server.config import get_settings
from oauth_server.db.base import InMemoryTable
from oauth_server.db.seed import demo_client_configurations
from oauth_server.models.client import ClientConfiguration, ClientId


class ClientConfigurationStore(Protocol):
    """Lookup contract for client policy; raises `StorageError` only on I/O failure."""

    async def find_by_id(self, client_id: ClientId) -> ClientConfiguration | None: ...

    async def find_by_client_id(self, client_id: str) -> ClientConfiguration | None: ...


class InMemoryClientConfigurationStore:
    """Process-local client configuration store."""

    def __init__(self, configurations: Iterable[ClientConfiguration] = ()) -> None:
        self._table: InMemoryTable[ClientId, ClientConfiguration] = InMemoryTable(
            key=lambda configuration: configuration.client_id,
            rows=configurations,
        )

    async def find_by_id(self, client_id: ClientId) -> ClientConfiguration | None:
        """Fetch configuration by typed client ID."""
        return await self._table.get(client_id)

    async def find_by_client_id(self, client_id: str) -> ClientConfiguration | None:
        """Fetch configuration by raw client ID string."""
        if not client_id:
            return None
        return await self.find_by_id(ClientId(client_id))

    async def save(self, configuration: ClientConfiguration) -> None:
        """Register or replace a client configuration."""
        await self._table.put(configuration)

    async def delete(self, client_id: ClientId) -> bool:
        """Remove a client configuration; its secrets are left untouched."""
        return await self._table.delete(client_id)


@lru_cache
def get_client_configuration_store() -> InMemoryClientConfigurationStore:
    """Create and cache the shared client configuration store."""
    if not get_settings().clients.seed_demo_clients:
        return InMemoryClientConfigurationStore()
    return InMemoryClientConfigurationStore(demo_client_configurations())
