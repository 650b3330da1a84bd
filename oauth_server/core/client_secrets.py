"""Client secret generation, hashing, and verification primitives."""

from __future__ import annotations

import secrets
from functools import lru_cache

from passlib.context import CryptContext

from oauth_server.config import get_settings


class ClientSecretHasher:
    """Argon2 hashing for client secrets."""

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4) -> None:
        self._context = CryptContext(
            schemes=["argon2"],
            deprecated="auto",
            argon2__time_cost=time_cost,
            argon2__memory_cost=memory_cost,
            argon2__parallelism=parallelism,
        )

    def generate_secret(self) -> str:
        """Generate a random client secret suitable for one-time display."""
        return secrets.token_urlsafe(32)

    def hash_secret(self, secret: str | bytes) -> str:
        """Return a salted argon2 hash for the secret."""
        return str(self._context.hash(secret))

    def verify_secret(self, secret: str | bytes, hashed_secret: str) -> bool:
        """Verify a candidate secret; unparseable stored hashes never match."""
        try:
            return bool(self._context.verify(secret, hashed_secret))
        except ValueError:
            return False

    def dummy_verify(self) -> None:
        """Spend one verification worth of time when no hash is available."""
        self._context.dummy_verify()


@lru_cache
def get_client_secret_hasher() -> ClientSecretHasher:
    """Build and cache the secret hasher from settings."""
    hashing = get_settings().hashing
    return ClientSecretHasher(
        time_cost=hashing.time_cost,
        memory_cost=hashing.memory_cost,
        parallelism=hashing.parallelism,
    )
