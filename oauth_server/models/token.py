"""Issued token records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from oauth_server.core.scopes import Scope
from oauth_server.models.client import ClientId


@dataclass(frozen=True)
class AccessToken:
    """Bearer access token and the context it was issued in."""

    client_id: ClientId
    username: str
    scopes: frozenset[Scope] | None = None
    id: UUID = field(default_factory=uuid4)
    issued_at: datetime = field(default_factory=lambda: datetime.now(UTC))
