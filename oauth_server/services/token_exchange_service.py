"""Token exchange orchestration: grant dispatch, validation, and issuance."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

import structlog

from oauth_server.core.errors import GrantValidationError, OAuthErrorKind
from oauth_server.models.client import GrantType, UnsupportedGrantTypeError, parse_grant_type
from oauth_server.models.principal import ClientPrincipal
from oauth_server.services.password_grant_service import (
    PasswordGrantValidator,
    get_password_grant_validator,
)
from oauth_server.services.token_service import TokenService, get_token_service

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TokenExchangeSuccess:
    """Successful token response (RFC 6749 section 5.1)."""

    access_token: str
    expires_in: int
    token_type: str = "bearer"
    refresh_token: str | None = None
    scope: str | None = None
    state: str | None = None


@dataclass(frozen=True)
class TokenExchangeFailure:
    """Error token response (RFC 6749 section 5.2)."""

    error: OAuthErrorKind
    error_description: str


TokenExchangeResult = TokenExchangeSuccess | TokenExchangeFailure


class TokenExchangeService:
    """Run an authenticated token request through its grant pipeline."""

    def __init__(
        self,
        password_grant_validator: PasswordGrantValidator,
        token_service: TokenService,
    ) -> None:
        self._password_grant_validator = password_grant_validator
        self._token_service = token_service

    async def exchange(
        self,
        principal: ClientPrincipal,
        form: Mapping[str, str],
    ) -> TokenExchangeResult:
        """Dispatch on grant type and return a success or the first failure."""
        raw_grant_type = form.get("grant_type")
        if raw_grant_type is None:
            return TokenExchangeFailure(
                OAuthErrorKind.INVALID_REQUEST, "missing parameter: grant_type"
            )
        try:
            grant_type = parse_grant_type(raw_grant_type)
        except UnsupportedGrantTypeError as exc:
            return TokenExchangeFailure(OAuthErrorKind.UNSUPPORTED_GRANT_TYPE, str(exc))

        try:
            if grant_type is GrantType.PASSWORD:
                return await self._exchange_password(principal, form)
        except GrantValidationError as exc:
            logger.info(
                "token_request_rejected",
                client_id=str(principal.client_id),
                grant_type=grant_type.value,
                error=exc.kind.value,
            )
            return TokenExchangeFailure(exc.kind, exc.description)
        raise AssertionError(f"Unhandled grant type: {grant_type.value}")

    async def _exchange_password(
        self,
        principal: ClientPrincipal,
        form: Mapping[str, str],
    ) -> TokenExchangeSuccess:
        grant = self._password_grant_validator.validate(principal, form)
        issued = await self._token_service.issue_for_password_grant(grant)
        return TokenExchangeSuccess(
            access_token=str(issued.access_token),
            expires_in=issued.expires_in,
            refresh_token=str(issued.refresh_token) if issued.refresh_token else None,
            scope=issued.scope,
        )


@lru_cache
def get_token_exchange_service() -> TokenExchangeService:
    """Create and cache the token exchange service."""
    return TokenExchangeService(
        password_grant_validator=get_password_grant_validator(),
        token_service=get_token_service(),
    )
