"""Integration tests for global exception handlers."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient

from oauth_server.core.errors import ClientAuthenticationError, OAuthError
from oauth_server.db.base import StorageError
from oauth_server.error_handlers import register_exception_handlers


def _build_error_app(environment: str = "production") -> FastAPI:
    """Build minimal app with registered global exception handlers."""
    app = FastAPI()
    register_exception_handlers(app, environment=environment, realm="errors")

    @app.get("/oauth-error")
    async def oauth_error() -> None:
        raise OAuthError("nope", "unauthorized_client", 403)

    @app.get("/client-auth")
    async def client_auth() -> None:
        raise ClientAuthenticationError()

    @app.get("/http-exception")
    async def http_exception() -> None:
        raise HTTPException(status_code=409, detail="Conflict here.")

    @app.get("/http-server-error")
    async def http_server_error() -> None:
        raise HTTPException(status_code=502, detail={"error_description": "Upstream down."})

    @app.get("/storage")
    async def storage() -> None:
        raise StorageError("connection refused to 10.0.0.5")

    @app.get("/unhandled")
    async def unhandled() -> None:
        raise RuntimeError("sensitive internal detail")

    @app.get("/validation")
    async def validation(required_value: int) -> dict[str, int]:
        return {"required_value": required_value}

    return app


async def _get(app: FastAPI, path: str):
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://testserver",
    ) as client:
        return await client.get(path)


@pytest.mark.asyncio
async def test_oauth_error_uses_error_shape() -> None:
    response = await _get(_build_error_app(), "/oauth-error")

    assert response.status_code == 403
    assert response.json() == {"error": "unauthorized_client", "error_description": "nope"}
    assert "www-authenticate" not in response.headers


@pytest.mark.asyncio
async def test_client_authentication_error_challenges_basic() -> None:
    response = await _get(_build_error_app(), "/client-auth")

    assert response.status_code == 401
    assert response.json() == {
        "error": "invalid_client",
        "error_description": "Client authentication failed.",
    }
    assert response.headers["www-authenticate"] == 'Basic realm="errors"'


@pytest.mark.asyncio
async def test_http_exception_is_invalid_request() -> None:
    response = await _get(_build_error_app(), "/http-exception")

    assert response.status_code == 409
    assert response.json() == {"error": "invalid_request", "error_description": "Conflict here."}


@pytest.mark.asyncio
async def test_http_server_error_is_server_error() -> None:
    response = await _get(_build_error_app(), "/http-server-error")

    assert response.status_code == 502
    assert response.json() == {"error": "server_error", "error_description": "Upstream down."}


@pytest.mark.asyncio
async def test_storage_error_is_temporarily_unavailable() -> None:
    """Store failures are retryable and never leak backend detail."""
    response = await _get(_build_error_app(), "/storage")

    assert response.status_code == 503
    body = response.json()
    assert body["error"] == "temporarily_unavailable"
    assert "10.0.0.5" not in body["error_description"]


@pytest.mark.asyncio
async def test_validation_error_is_invalid_request() -> None:
    response = await _get(_build_error_app(), "/validation")

    assert response.status_code == 400
    assert response.json() == {
        "error": "invalid_request",
        "error_description": "Invalid request payload.",
    }


@pytest.mark.asyncio
async def test_unhandled_error_hides_internal_detail_in_production() -> None:
    response = await _get(_build_error_app(environment="production"), "/unhandled")

    assert response.status_code == 500
    assert response.json() == {"error": "server_error", "error_description": "Internal server error."}


@pytest.mark.asyncio
async def test_unhandled_error_shows_detail_in_development() -> None:
    response = await _get(_build_error_app(environment="development"), "/unhandled")

    assert response.status_code == 500
    assert response.json() == {
        "error": "server_error",
        "error_description": "sensitive internal detail",
    }
