"""Shared fixtures: fast secret hashing and pre-populated in-memory stores."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

import pytest

from oauth_server.core.client_secrets import ClientSecretHasher
from oauth_server.core.scopes import ScopeRegistry
from oauth_server.db.client_configurations import InMemoryClientConfigurationStore
from oauth_server.db.client_secrets import InMemoryClientSecretStore
from oauth_server.db.tokens import InMemoryTokenStore
from oauth_server.models.client import (
    ClientAction,
    ClientConfiguration,
    ClientId,
    ClientSecret,
    ClientType,
    GrantType,
)

CONFIDENTIAL_CLIENT_ID = "confidential-cicada"
CONFIDENTIAL_CLIENT_SECRET = "9VylF3DbEeJbtdbih3lqpNXBw@Non#bi"
PUBLIC_CLIENT_ID = "public-piranha"

ConfigurationFactory = Callable[..., ClientConfiguration]


@dataclass
class ClientStores:
    """Stores seeded with one confidential and one public client."""

    configurations: InMemoryClientConfigurationStore
    secrets: InMemoryClientSecretStore
    tokens: InMemoryTokenStore


@pytest.fixture
def hasher() -> ClientSecretHasher:
    """Argon2 hasher with minimal cost parameters for fast tests."""
    return ClientSecretHasher(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def scope_registry() -> ScopeRegistry:
    """Registry matching the default configured scopes."""
    return ScopeRegistry(["basic", "read", "write"])


@pytest.fixture
def make_configuration(scope_registry: ScopeRegistry) -> ConfigurationFactory:
    """Factory for client configurations with permissive defaults."""

    def _make(
        client_id: str,
        client_type: ClientType = ClientType.CONFIDENTIAL,
        scopes: Iterable[str] = ("basic", "read", "write"),
        grant_types: Iterable[GrantType] = (GrantType.PASSWORD,),
        actions: Iterable[ClientAction] = (),
    ) -> ClientConfiguration:
        return ClientConfiguration(
            client_id=ClientId(client_id),
            client_type=client_type,
            allowed_scopes=frozenset(scope_registry.get(name) for name in scopes),
            allowed_actions=frozenset(actions),
            allowed_grant_types=frozenset(grant_types),
        )

    return _make


@pytest.fixture
def client_stores(
    hasher: ClientSecretHasher,
    make_configuration: ConfigurationFactory,
) -> ClientStores:
    """Stores holding a confidential client allowed basic/read and a public client."""
    configurations = InMemoryClientConfigurationStore(
        [
            make_configuration(
                CONFIDENTIAL_CLIENT_ID,
                scopes=("basic", "read"),
                actions=(ClientAction.INTROSPECT,),
            ),
            make_configuration(PUBLIC_CLIENT_ID, client_type=ClientType.PUBLIC),
        ]
    )
    secrets = InMemoryClientSecretStore(
        [
            ClientSecret(
                client_id=ClientId(CONFIDENTIAL_CLIENT_ID),
                hashed_secret=hasher.hash_secret(CONFIDENTIAL_CLIENT_SECRET),
            )
        ]
    )
    return ClientStores(configurations=configurations, secrets=secrets, tokens=InMemoryTokenStore())
