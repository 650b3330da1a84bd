"""Token endpoint (RFC 6749 section 3.2)."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from oauth_server.dependencies import TokenForm, authenticate_client, read_token_form
from oauth_server.middleware.metrics import MetricsRegistry, get_metrics_registry
from oauth_server.models.client import GrantType
from oauth_server.models.principal import ClientPrincipal
from oauth_server.schemas.token import OAuthErrorResponse, TokenExchangeSuccessResponse
from oauth_server.services.audit_service import AuditService, get_audit_service
from oauth_server.services.token_exchange_service import (
    TokenExchangeFailure,
    TokenExchangeService,
    get_token_exchange_service,
)

router = APIRouter(tags=["token"])

_NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}
_SUPPORTED_GRANT_TYPES = {grant_type.value for grant_type in GrantType}


def _grant_type_label(raw_grant_type: str | None) -> str:
    """Bound metric label cardinality to known grant types."""
    if raw_grant_type is None:
        return "missing"
    return raw_grant_type if raw_grant_type in _SUPPORTED_GRANT_TYPES else "unsupported"


@router.post(
    "/token",
    response_model=TokenExchangeSuccessResponse,
    responses={400: {"model": OAuthErrorResponse}, 401: {"model": OAuthErrorResponse}},
)
async def token_exchange(
    request: Request,
    form: Annotated[TokenForm, Depends(read_token_form)],
    principal: Annotated[ClientPrincipal, Depends(authenticate_client)],
    token_exchange_service: Annotated[TokenExchangeService, Depends(get_token_exchange_service)],
    audit_service: Annotated[AuditService, Depends(get_audit_service)],
    metrics: Annotated[MetricsRegistry, Depends(get_metrics_registry)],
) -> JSONResponse:
    """Exchange an authorization grant for an access token."""
    result = await token_exchange_service.exchange(principal, form)
    grant_type = form.get("grant_type")

    if isinstance(result, TokenExchangeFailure):
        audit_service.log_token_exchange(
            request,
            client_id=str(principal.client_id),
            grant_type=grant_type,
            success=False,
            error_code=result.error.value,
        )
        metrics.record_token_outcome(_grant_type_label(grant_type), result.error.value)
        payload = OAuthErrorResponse(
            error=result.error.value,
            error_description=result.error_description,
        )
        return JSONResponse(status_code=400, content=payload.model_dump(), headers=_NO_STORE_HEADERS)

    audit_service.log_token_exchange(
        request,
        client_id=str(principal.client_id),
        grant_type=grant_type,
        success=True,
    )
    metrics.record_token_outcome(_grant_type_label(grant_type), "issued")
    payload = TokenExchangeSuccessResponse(
        access_token=result.access_token,
        token_type="bearer",
        expires_in=result.expires_in,
        refresh_token=result.refresh_token,
        scope=result.scope,
        state=result.state,
    )
    return JSONResponse(
        status_code=200,
        content=payload.model_dump(exclude_none=True),
        headers=_NO_STORE_HEADERS,
    )
