"""Token endpoint response schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class TokenExchangeSuccessResponse(BaseModel):
    """Access token response payload (RFC 6749 section 5.1)."""

    access_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_in: int = Field(ge=1)
    refresh_token: str | None = None
    scope: str | None = None
    state: str | None = None


class OAuthErrorResponse(BaseModel):
    """Error response payload (RFC 6749 section 5.2)."""

    error: str
    error_description: str
