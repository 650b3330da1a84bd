"""Token introspection endpoint (RFC 7662)."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from oauth_server.core.errors import InvalidRequestError
from oauth_server.dependencies import TokenForm, read_token_form, require_client_action
from oauth_server.models.client import ClientAction
from oauth_server.models.principal import ConfidentialClient
from oauth_server.schemas.introspection import IntrospectionResponse
from oauth_server.schemas.token import OAuthErrorResponse
from oauth_server.services.audit_service import AuditService, get_audit_service
from oauth_server.services.introspection_service import (
    IntrospectionService,
    get_introspection_service,
)

router = APIRouter(tags=["introspection"])


@router.post(
    "/introspect",
    response_model=IntrospectionResponse,
    responses={
        400: {"model": OAuthErrorResponse},
        401: {"model": OAuthErrorResponse},
        403: {"model": OAuthErrorResponse},
    },
)
async def introspect_token(
    request: Request,
    form: Annotated[TokenForm, Depends(read_token_form)],
    client: Annotated[ConfidentialClient, Depends(require_client_action(ClientAction.INTROSPECT))],
    introspection_service: Annotated[IntrospectionService, Depends(get_introspection_service)],
    audit_service: Annotated[AuditService, Depends(get_audit_service)],
) -> JSONResponse:
    """Report whether an access token is active."""
    raw_token = form.get("token")
    if raw_token is None:
        raise InvalidRequestError("missing parameter: token")

    result = await introspection_service.introspect(raw_token)
    audit_service.log_token_introspection(
        request, client_id=str(client.client_id), active=result.active
    )
    payload = IntrospectionResponse(
        active=result.active,
        client_id=result.client_id,
        username=result.username,
        scope=result.scope,
        token_type="bearer" if result.token_type else None,
    )
    return JSONResponse(status_code=200, content=payload.model_dump(exclude_none=True))
