"""End-to-end tests against the fully wired application."""

from __future__ import annotations

import base64
from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from oauth_server.config import get_settings
from oauth_server.core.client_secrets import get_client_secret_hasher
from oauth_server.core.scopes import get_scope_registry
from oauth_server.db.client_configurations import get_client_configuration_store
from oauth_server.db.client_secrets import get_client_secret_store
from oauth_server.db.seed import (
    DEMO_CONFIDENTIAL_CLIENT_ID,
    DEMO_CONFIDENTIAL_CLIENT_SECRET,
    DEMO_PUBLIC_CLIENT_ID,
)
from oauth_server.db.tokens import get_token_store
from oauth_server.main import create_app
from oauth_server.services.audit_service import get_audit_service
from oauth_server.services.client_authentication_service import get_client_authentication_service
from oauth_server.services.introspection_service import get_introspection_service
from oauth_server.services.password_grant_service import get_password_grant_validator
from oauth_server.services.token_exchange_service import get_token_exchange_service
from oauth_server.services.token_service import get_token_service

_CACHED_FACTORIES = (
    get_settings,
    get_scope_registry,
    get_client_secret_hasher,
    get_client_configuration_store,
    get_client_secret_store,
    get_token_store,
    get_audit_service,
    get_client_authentication_service,
    get_password_grant_validator,
    get_token_service,
    get_token_exchange_service,
    get_introspection_service,
)


def _clear_caches() -> None:
    for factory in _CACHED_FACTORIES:
        factory.cache_clear()


@pytest.fixture
def app(monkeypatch) -> Iterator[FastAPI]:
    """Application with demo clients seeded and cheap hashing parameters."""
    monkeypatch.setenv("HASHING__TIME_COST", "1")
    monkeypatch.setenv("HASHING__MEMORY_COST", "1024")
    monkeypatch.setenv("HASHING__PARALLELISM", "1")
    monkeypatch.setenv("TOKEN__ACCESS_TOKEN_TTL_SECONDS", "600")
    _clear_caches()
    yield create_app()
    _clear_caches()


def _demo_basic() -> dict[str, str]:
    raw = f"{DEMO_CONFIDENTIAL_CLIENT_ID}:{DEMO_CONFIDENTIAL_CLIENT_SECRET}".encode("utf-8")
    return {"Authorization": f"Basic {base64.b64encode(raw).decode('ascii')}"}


@pytest.mark.asyncio
async def test_issued_token_can_be_introspected(app: FastAPI) -> None:
    """A token from /token is reported active by /introspect."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        token_response = await client.post(
            "/token",
            data={"grant_type": "password", "username": "alice", "password": "pw", "scope": "basic"},
            headers=_demo_basic(),
        )
        assert token_response.status_code == 200
        access_token = token_response.json()["access_token"]
        assert token_response.json()["expires_in"] == 600

        introspect_response = await client.post(
            "/introspect",
            data={"token": access_token},
            headers=_demo_basic(),
        )

    assert introspect_response.status_code == 200
    assert introspect_response.json() == {
        "active": True,
        "client_id": DEMO_CONFIDENTIAL_CLIENT_ID,
        "username": "alice",
        "scope": "basic",
        "token_type": "bearer",
    }
    assert introspect_response.headers.get("x-correlation-id")
    assert introspect_response.headers["x-content-type-options"] == "nosniff"


@pytest.mark.asyncio
async def test_demo_public_client_is_refused_password_grant(app: FastAPI) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post(
            "/token",
            data={
                "grant_type": "password",
                "client_id": DEMO_PUBLIC_CLIENT_ID,
                "username": "alice",
                "password": "pw",
            },
        )

    assert response.status_code == 400
    assert response.json()["error"] == "unauthorized_client"


@pytest.mark.asyncio
async def test_demo_client_cannot_request_unpermitted_scope(app: FastAPI) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post(
            "/token",
            data={"grant_type": "password", "username": "alice", "password": "pw", "scope": "read"},
            headers=_demo_basic(),
        )

    assert response.status_code == 400
    assert response.json() == {
        "error": "invalid_scope",
        "error_description": "requested scope is not permitted for this client",
    }


@pytest.mark.asyncio
async def test_probes_and_metrics_are_served(app: FastAPI) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        await client.post("/token", data={"grant_type": "nope"}, headers=_demo_basic())
        ready = await client.get("/health/ready")
        metrics = await client.get("/metrics")

    assert ready.status_code == 200
    assert ready.json() == {"status": "ready"}
    assert metrics.status_code == 200
    assert (
        'oauth_token_service_token_requests_total{grant_type="unsupported",'
        'outcome="unsupported_grant_type"}'
    ) in metrics.text
