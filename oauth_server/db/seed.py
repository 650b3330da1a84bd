"""Demo clients loaded into the in-memory stores at startup."""

from __future__ import annotations

from oauth_server.core.client_secrets import ClientSecretHasher
from oauth_server.core.scopes import ScopeRegistry, get_scope_registry
from oauth_server.models.client import (
    ClientAction,
    ClientConfiguration,
    ClientId,
    ClientSecret,
    ClientType,
    GrantType,
)

DEMO_CONFIDENTIAL_CLIENT_ID = "aardvark"
DEMO_CONFIDENTIAL_CLIENT_SECRET = "badger"
DEMO_PUBLIC_CLIENT_ID = "badger"


def demo_client_configurations(registry: ScopeRegistry | None = None) -> list[ClientConfiguration]:
    """Return one confidential and one public demo client."""
    registry = registry or get_scope_registry()
    basic = registry.get("basic")
    return [
        ClientConfiguration(
            client_id=ClientId(DEMO_CONFIDENTIAL_CLIENT_ID),
            client_type=ClientType.CONFIDENTIAL,
            allowed_scopes=frozenset({basic}),
            allowed_actions=frozenset({ClientAction.INTROSPECT}),
            allowed_grant_types=frozenset({GrantType.PASSWORD}),
        ),
        ClientConfiguration(
            client_id=ClientId(DEMO_PUBLIC_CLIENT_ID),
            client_type=ClientType.PUBLIC,
            allowed_scopes=frozenset({basic}),
        ),
    ]


def demo_client_secrets(hasher: ClientSecretHasher) -> list[ClientSecret]:
    """Return the hashed secret for the confidential demo client."""
    return [
        ClientSecret(
            client_id=ClientId(DEMO_CONFIDENTIAL_CLIENT_ID),
            hashed_secret=hasher.hash_secret(DEMO_CONFIDENTIAL_CLIENT_SECRET),
        )
    ]
