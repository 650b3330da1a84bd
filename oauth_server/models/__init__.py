"""Domain model exports."""

from oauth_server.models.client import (
    ClientAction,
    ClientConfiguration,
    ClientId,
    ClientSecret,
    ClientType,
    GrantType,
)
from oauth_server.models.principal import ClientPrincipal, ConfidentialClient, PublicClient
from oauth_server.models.token import AccessToken

__all__ = [
    "AccessToken",
    "ClientAction",
    "ClientConfiguration",
    "ClientId",
    "ClientPrincipal",
    "ClientSecret",
    "ClientType",
    "ConfidentialClient",
    "GrantType",
    "PublicClient",
]
