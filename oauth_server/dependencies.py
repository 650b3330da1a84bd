"""Request-stage dependencies: form body parsing and client authentication."""

from __future__ import annotations

import base64
import binascii
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Annotated
from urllib.parse import parse_qsl, unquote_plus

from fastapi import Depends, HTTPException, Request

from oauth_server.core.errors import (
    ClientAuthenticationError,
    InvalidRequestError,
    OAuthError,
    OAuthErrorKind,
)
from oauth_server.models.client import ClientAction
from oauth_server.models.principal import ClientPrincipal, ConfidentialClient
from oauth_server.services.audit_service import AuditService, get_audit_service
from oauth_server.services.client_authentication_service import (
    ClientAuthenticationService,
    get_client_authentication_service,
)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

TokenForm = dict[str, str]


@dataclass(frozen=True)
class BasicCredentials:
    """Client credentials presented with HTTP Basic authentication."""

    client_id: str
    client_secret: str = field(repr=False)


class _MalformedCredentialsError(Exception):
    """Raised when an Authorization: Basic header cannot be decoded."""


async def read_token_form(request: Request) -> TokenForm:
    """Buffer and parse the url-encoded request body.

    FastAPI caches this dependency per request, so the authentication stage and
    the endpoint read the same parsed fields.
    """
    media_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if media_type != FORM_CONTENT_TYPE:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type; expected {FORM_CONTENT_TYPE}.",
        )

    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidRequestError("request body is not valid UTF-8") from None

    form: TokenForm = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        if key in form:
            raise InvalidRequestError(f"repeated parameter: {key}")
        form[key] = value
    return form


def _extract_basic_credentials(request: Request) -> BasicCredentials | None:
    """Extract client ID and secret from an Authorization: Basic header."""
    authorization = request.headers.get("authorization", "").strip()
    if not authorization:
        return None
    scheme, _, encoded = authorization.partition(" ")
    if scheme.lower() != "basic":
        return None

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise _MalformedCredentialsError from exc

    client_id, separator, client_secret = decoded.partition(":")
    if not separator or not client_id:
        raise _MalformedCredentialsError
    # RFC 6749 section 2.3.1: both parts are form-url-encoded before base64.
    return BasicCredentials(
        client_id=unquote_plus(client_id),
        client_secret=unquote_plus(client_secret),
    )


async def authenticate_client(
    request: Request,
    form: Annotated[TokenForm, Depends(read_token_form)],
    authenticator: Annotated[
        ClientAuthenticationService, Depends(get_client_authentication_service)
    ],
    audit_service: Annotated[AuditService, Depends(get_audit_service)],
) -> ClientPrincipal:
    """Resolve the client principal from exactly one credential channel.

    Basic credentials select confidential authentication; a body `client_id`
    alone selects public authentication. Both or neither is rejected.
    """
    try:
        basic = _extract_basic_credentials(request)
    except _MalformedCredentialsError:
        audit_service.log_client_authentication(
            request, channel="basic", success=False, failure_reason="malformed_credentials"
        )
        raise ClientAuthenticationError() from None

    body_client_id = form.get("client_id")

    if basic is not None and body_client_id is not None:
        audit_service.log_client_authentication(
            request, channel="ambiguous", success=False, failure_reason="multiple_credentials"
        )
        raise ClientAuthenticationError()

    if basic is None and body_client_id is None:
        audit_service.log_client_authentication(
            request, channel="none", success=False, failure_reason="missing_credentials"
        )
        raise ClientAuthenticationError()

    principal: ClientPrincipal | None
    if basic is not None:
        channel = "basic"
        principal = await authenticator.authenticate_as_confidential_client(
            basic.client_id, basic.client_secret.encode("utf-8")
        )
    else:
        channel = "client_id"
        principal = await authenticator.authenticate_as_public_client(body_client_id or "")

    if principal is None:
        audit_service.log_client_authentication(
            request, channel=channel, success=False, failure_reason="invalid_credentials"
        )
        raise ClientAuthenticationError()

    audit_service.log_client_authentication(
        request, channel=channel, success=True, client_id=str(principal.client_id)
    )
    return principal


async def authenticate_confidential_client(
    request: Request,
    form: Annotated[TokenForm, Depends(read_token_form)],
    authenticator: Annotated[
        ClientAuthenticationService, Depends(get_client_authentication_service)
    ],
    audit_service: Annotated[AuditService, Depends(get_audit_service)],
) -> ConfidentialClient:
    """Require a confidential client authenticated with HTTP Basic."""
    del form
    try:
        basic = _extract_basic_credentials(request)
    except _MalformedCredentialsError:
        audit_service.log_client_authentication(
            request, channel="basic", success=False, failure_reason="malformed_credentials"
        )
        raise ClientAuthenticationError() from None
    if basic is None:
        audit_service.log_client_authentication(
            request, channel="basic", success=False, failure_reason="missing_credentials"
        )
        raise ClientAuthenticationError()

    principal = await authenticator.authenticate_as_confidential_client(
        basic.client_id, basic.client_secret.encode("utf-8")
    )
    if principal is None:
        audit_service.log_client_authentication(
            request, channel="basic", success=False, failure_reason="invalid_credentials"
        )
        raise ClientAuthenticationError()

    audit_service.log_client_authentication(
        request, channel="basic", success=True, client_id=str(principal.client_id)
    )
    return principal


def require_client_action(
    action: ClientAction,
) -> Callable[[ConfidentialClient], Awaitable[ConfidentialClient]]:
    """Require that the authenticated confidential client may perform an action."""

    async def checker(
        client: Annotated[ConfidentialClient, Depends(authenticate_confidential_client)],
    ) -> ConfidentialClient:
        if not client.can_perform_action(action):
            raise OAuthError(
                f"client is not authorized to perform action: {action.value}",
                OAuthErrorKind.UNAUTHORIZED_CLIENT.value,
                403,
            )
        return client

    return checker
