"""Client authentication against registered configurations and secrets."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from functools import lru_cache

import structlog

from oauth_server.core.client_secrets import ClientSecretHasher, get_client_secret_hasher
from oauth_server.db.client_configurations import (
    ClientConfigurationStore,
    get_client_configuration_store,
)
from oauth_server.db.client_secrets import ClientSecretStore, get_client_secret_store
from oauth_server.models.client import ClientSecret, ClientType
from oauth_server.models.principal import ConfidentialClient, PublicClient

logger = structlog.get_logger(__name__)


class ClientAuthenticationService:
    """Resolve client principals from presented credentials.

    Credential failures of every kind collapse to `None`. `StorageError` from
    either store is propagated unchanged so callers can tell an outage apart
    from bad credentials.
    """

    def __init__(
        self,
        configuration_store: ClientConfigurationStore,
        secret_store: ClientSecretStore,
        hasher: ClientSecretHasher,
    ) -> None:
        self._configuration_store = configuration_store
        self._secret_store = secret_store
        self._hasher = hasher

    async def authenticate_as_public_client(self, client_id: str) -> PublicClient | None:
        """Return a public principal when the ID names a public client."""
        configuration = await self._configuration_store.find_by_client_id(client_id)
        if configuration is None or configuration.client_type is not ClientType.PUBLIC:
            return None
        return PublicClient(configuration)

    async def authenticate_as_confidential_client(
        self,
        client_id: str,
        client_secret: bytes,
    ) -> ConfidentialClient | None:
        """Return a confidential principal when the secret matches any on file."""
        secrets = await self._secret_store.find_all_by_client_id(client_id)
        matched = await self._find_matching_secret(secrets, client_secret)
        if matched is None:
            return None

        # Owner comes from the matched record, not the caller-supplied ID.
        configuration = await self._configuration_store.find_by_id(matched.client_id)
        if configuration is None or configuration.client_type is not ClientType.CONFIDENTIAL:
            logger.warning(
                "client_secret_without_confidential_configuration",
                client_id=str(matched.client_id),
                secret_id=str(matched.id),
            )
            return None
        return ConfidentialClient(configuration)

    async def _find_matching_secret(
        self,
        secrets: Sequence[ClientSecret],
        client_secret: bytes,
    ) -> ClientSecret | None:
        """Return the first stored secret that verifies, hashing off the event loop."""
        if not secrets:
            await asyncio.to_thread(self._hasher.dummy_verify)
            return None
        for secret in secrets:
            if await asyncio.to_thread(
                self._hasher.verify_secret, client_secret, secret.hashed_secret
            ):
                return secret
        return None


@lru_cache
def get_client_authentication_service() -> ClientAuthenticationService:
    """Create and cache the client authentication service."""
    return ClientAuthenticationService(
        configuration_store=get_client_configuration_store(),
        secret_store=get_client_secret_store(),
        hasher=get_client_secret_hasher(),
    )
