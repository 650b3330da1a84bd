"""Authenticated client principals."""

from __future__ import annotations

from dataclasses import dataclass

from oauth_server.core.scopes import Scope
from oauth_server.models.client import (
    ClientAction,
    ClientConfiguration,
    ClientId,
    GrantType,
)


@dataclass(frozen=True)
class _AuthenticatedClient:
    configuration: ClientConfiguration

    @property
    def client_id(self) -> ClientId:
        """Return the identifier of the authenticated client."""
        return self.configuration.client_id

    def can_perform_grant_type(self, grant_type: GrantType) -> bool:
        """Return True when the client may use the grant type."""
        return grant_type in self.configuration.allowed_grant_types

    def can_be_issued(self, scope: Scope) -> bool:
        """Return True when tokens for this client may carry the scope."""
        return scope in self.configuration.allowed_scopes

    def can_perform_action(self, action: ClientAction) -> bool:
        """Return True when the client may perform the action."""
        return action in self.configuration.allowed_actions


@dataclass(frozen=True)
class ConfidentialClient(_AuthenticatedClient):
    """Client that authenticated with an ID and secret."""


@dataclass(frozen=True)
class PublicClient(_AuthenticatedClient):
    """Client identified by its ID alone."""


ClientPrincipal = ConfidentialClient | PublicClient
