"""Health check router endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from oauth_server.db.base import StorageError
from oauth_server.db.client_configurations import (
    ClientConfigurationStore,
    get_client_configuration_store,
)

router = APIRouter(prefix="/health", tags=["health"])


async def check_client_store_ready(
    store: Annotated[ClientConfigurationStore, Depends(get_client_configuration_store)],
) -> bool:
    """Return True when the client configuration store answers a lookup."""
    try:
        await store.find_by_client_id("health-check")
    except StorageError:
        return False
    return True


@router.get("/live")
async def live() -> dict[str, str]:
    """Liveness probe endpoint."""
    return {"status": "live"}


@router.get("/ready")
async def ready(
    client_store_ready: Annotated[bool, Depends(check_client_store_ready)],
) -> dict[str, str]:
    """Readiness probe requiring the client store."""
    if not client_store_ready:
        raise HTTPException(status_code=503, detail="Service not ready.")
    return {"status": "ready"}
