"""Resource owner password credentials grant validation (RFC 6749 section 4.3)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache

from oauth_server.core.errors import GrantValidationError, OAuthErrorKind
from oauth_server.core.scopes import Scope, ScopeParseError, ScopeRegistry, get_scope_registry
from oauth_server.models.client import GrantType
from oauth_server.models.principal import ClientPrincipal, ConfidentialClient


@dataclass(frozen=True)
class PasswordGrantRequest:
    """A password grant request that passed validation."""

    principal: ConfidentialClient
    username: str
    password: str = field(repr=False)
    scopes: frozenset[Scope] | None = None


class PasswordGrantValidator:
    """Check a password grant request, stopping at the first failure.

    Order: client authorization, username, password, scope. Client
    authorization runs first so no field work is done for a client that could
    never complete the grant.
    """

    grant_type = GrantType.PASSWORD

    def __init__(self, scope_registry: ScopeRegistry) -> None:
        self._scope_registry = scope_registry

    def validate(
        self,
        principal: ClientPrincipal,
        form: Mapping[str, str],
    ) -> PasswordGrantRequest:
        """Return a validated request or raise `GrantValidationError`."""
        if not isinstance(principal, ConfidentialClient) or not principal.can_perform_grant_type(
            self.grant_type
        ):
            raise GrantValidationError(
                OAuthErrorKind.UNAUTHORIZED_CLIENT,
                f"client is not authorized to use grant type: {self.grant_type.value}",
            )

        username = form.get("username")
        if username is None:
            raise GrantValidationError(
                OAuthErrorKind.INVALID_REQUEST, "missing parameter: username"
            )
        if not username.strip():
            raise GrantValidationError(
                OAuthErrorKind.INVALID_REQUEST, "invalid parameter: username"
            )

        # An empty password is a credential question, not a request shape one.
        password = form.get("password")
        if password is None:
            raise GrantValidationError(
                OAuthErrorKind.INVALID_REQUEST, "missing parameter: password"
            )

        try:
            scopes = self._scope_registry.parse(form.get("scope"))
        except ScopeParseError as exc:
            raise GrantValidationError(OAuthErrorKind.INVALID_SCOPE, str(exc)) from exc

        if scopes is not None and not all(principal.can_be_issued(scope) for scope in scopes):
            raise GrantValidationError(
                OAuthErrorKind.INVALID_SCOPE, "requested scope is not permitted for this client"
            )

        return PasswordGrantRequest(
            principal=principal,
            username=username,
            password=password,
            scopes=scopes,
        )


@lru_cache
def get_password_grant_validator() -> PasswordGrantValidator:
    """Create and cache the password grant validator."""
    return PasswordGrantValidator(scope_registry=get_scope_registry())
