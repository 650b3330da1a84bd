"""Client identity, policy, and secret records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID, uuid4

from oauth_server.core.scopes import Scope


class ClientType(str, Enum):
    """OAuth client kinds (RFC 6749 section 2.1)."""

    CONFIDENTIAL = "confidential"
    PUBLIC = "public"


class ClientAction(str, Enum):
    """Non-grant operations a client may be permitted to perform."""

    INTROSPECT = "introspect"


class GrantType(str, Enum):
    """Grant types the token endpoint understands."""

    PASSWORD = "password"


class UnsupportedGrantTypeError(ValueError):
    """Raised when a grant type value is not one the server supports."""


def parse_grant_type(value: str) -> GrantType:
    """Parse a request grant type value."""
    try:
        return GrantType(value)
    except ValueError:
        raise UnsupportedGrantTypeError(f"unsupported: {value}") from None


@dataclass(frozen=True)
class ClientId:
    """Opaque, non-empty client identifier."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Client ID must not be empty.")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ClientConfiguration:
    """Registered policy for one client."""

    client_id: ClientId
    client_type: ClientType
    redirect_uris: frozenset[str] = frozenset()
    allowed_scopes: frozenset[Scope] = frozenset()
    allowed_actions: frozenset[ClientAction] = frozenset()
    allowed_grant_types: frozenset[GrantType] = frozenset()


@dataclass(frozen=True)
class ClientSecret:
    """One stored, hashed credential belonging to a client."""

    client_id: ClientId
    hashed_secret: str = field(repr=False)
    id: UUID = field(default_factory=uuid4)
