"""Token introspection response schema."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class IntrospectionResponse(BaseModel):
    """RFC 7662 introspection payload; only `active` is present for inactive tokens."""

    active: bool
    client_id: str | None = None
    username: str | None = None
    scope: str | None = None
    token_type: Literal["bearer"] | None = None
