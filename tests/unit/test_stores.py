"""Unit tests for the in-memory client and token stores."""

from __future__ import annotations

import asyncio

import pytest

from oauth_server.core.client_secrets import ClientSecretHasher
from oauth_server.core.scopes import Scope, ScopeRegistry
from oauth_server.db.base import InMemoryTable
from oauth_server.db.client_configurations import InMemoryClientConfigurationStore
from oauth_server.db.client_secrets import InMemoryClientSecretStore
from oauth_server.db.seed import (
    DEMO_CONFIDENTIAL_CLIENT_ID,
    DEMO_CONFIDENTIAL_CLIENT_SECRET,
    DEMO_PUBLIC_CLIENT_ID,
    demo_client_configurations,
    demo_client_secrets,
)
from oauth_server.models.client import (
    ClientAction,
    ClientId,
    ClientSecret,
    ClientType,
    GrantType,
)
from tests.conftest import CONFIDENTIAL_CLIENT_ID, PUBLIC_CLIENT_ID, ClientStores


@pytest.mark.asyncio
async def test_configuration_lookup_by_typed_and_raw_id(client_stores: ClientStores) -> None:
    by_raw = await client_stores.configurations.find_by_client_id(PUBLIC_CLIENT_ID)
    by_typed = await client_stores.configurations.find_by_id(ClientId(PUBLIC_CLIENT_ID))

    assert by_raw is not None
    assert by_raw == by_typed
    assert by_raw.client_type is ClientType.PUBLIC


@pytest.mark.asyncio
@pytest.mark.parametrize("client_id", ["", "missing"])
async def test_configuration_lookup_misses_return_none(
    client_stores: ClientStores, client_id: str
) -> None:
    """Absent and empty IDs are not found rather than errors."""
    assert await client_stores.configurations.find_by_client_id(client_id) is None


@pytest.mark.asyncio
async def test_configuration_save_replaces_and_delete_removes(
    client_stores: ClientStores, make_configuration
) -> None:
    store = client_stores.configurations
    await store.save(make_configuration(PUBLIC_CLIENT_ID, scopes=("read",)))

    replaced = await store.find_by_client_id(PUBLIC_CLIENT_ID)
    assert replaced is not None
    assert replaced.allowed_scopes == frozenset({Scope("read")})

    assert await store.delete(ClientId(PUBLIC_CLIENT_ID)) is True
    assert await store.delete(ClientId(PUBLIC_CLIENT_ID)) is False
    assert await store.find_by_client_id(PUBLIC_CLIENT_ID) is None


@pytest.mark.asyncio
async def test_secret_lookup_returns_every_secret_for_client(
    client_stores: ClientStores, hasher: ClientSecretHasher
) -> None:
    extra = ClientSecret(
        client_id=ClientId(CONFIDENTIAL_CLIENT_ID), hashed_secret=hasher.hash_secret("second")
    )
    await client_stores.secrets.save(extra)

    by_raw = await client_stores.secrets.find_all_by_client_id(CONFIDENTIAL_CLIENT_ID)
    by_typed = await client_stores.secrets.find_all_by_client(ClientId(CONFIDENTIAL_CLIENT_ID))

    assert len(by_raw) == 2
    assert {secret.id for secret in by_raw} == {secret.id for secret in by_typed}
    assert await client_stores.secrets.find_by_id(extra.id) == extra
    assert await client_stores.secrets.find_all_by_client_id(PUBLIC_CLIENT_ID) == []


def test_secret_hash_is_not_in_repr(hasher: ClientSecretHasher) -> None:
    secret = ClientSecret(client_id=ClientId("cicada"), hashed_secret=hasher.hash_secret("s"))

    assert secret.hashed_secret not in repr(secret)


def test_client_id_rejects_empty_value() -> None:
    with pytest.raises(ValueError):
        ClientId("")


@pytest.mark.asyncio
async def test_table_serializes_concurrent_writes() -> None:
    """Concurrent puts under distinct keys all land."""
    table: InMemoryTable[int, int] = InMemoryTable(key=lambda value: value)

    await asyncio.gather(*(table.put(value) for value in range(50)))

    assert len(await table.select(lambda value: True)) == 50
    assert await table.get(49) == 49


@pytest.mark.asyncio
async def test_demo_clients_match_seed_contract(
    scope_registry: ScopeRegistry, hasher: ClientSecretHasher
) -> None:
    """The demo confidential client may introspect; the public one may not use password."""
    configurations = InMemoryClientConfigurationStore(demo_client_configurations(scope_registry))
    secrets = InMemoryClientSecretStore(demo_client_secrets(hasher))

    confidential = await configurations.find_by_client_id(DEMO_CONFIDENTIAL_CLIENT_ID)
    public = await configurations.find_by_client_id(DEMO_PUBLIC_CLIENT_ID)

    assert confidential is not None
    assert confidential.client_type is ClientType.CONFIDENTIAL
    assert confidential.allowed_scopes == frozenset({Scope("basic")})
    assert confidential.allowed_actions == frozenset({ClientAction.INTROSPECT})
    assert confidential.allowed_grant_types == frozenset({GrantType.PASSWORD})

    assert public is not None
    assert public.client_type is ClientType.PUBLIC
    assert public.allowed_grant_types == frozenset()

    [stored] = await secrets.find_all_by_client_id(DEMO_CONFIDENTIAL_CLIENT_ID)
    assert hasher.verify_secret(DEMO_CONFIDENTIAL_CLIENT_SECRET, stored.hashed_secret)
