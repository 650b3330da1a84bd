"""In-memory store exports."""

from oauth_server.db.base import StorageError
from oauth_server.db.client_configurations import (
    ClientConfigurationStore,
    InMemoryClientConfigurationStore,
    get_client_configuration_store,
)
from oauth_server.db.client_secrets import (
    ClientSecretStore,
    InMemoryClientSecretStore,
    get_client_secret_store,
)
from oauth_server.db.tokens import InMemoryTokenStore, TokenStore, get_token_store

__all__ = [
    "ClientConfigurationStore",
    "ClientSecretStore",
    "InMemoryClientConfigurationStore",
    "InMemoryClientSecretStore",
    "InMemoryTokenStore",
    "StorageError",
    "TokenStore",
    "get_client_configuration_store",
    "get_client_secret_store",
    "get_token_store",
]
