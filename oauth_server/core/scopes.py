"""Scope registry and space-delimited scope parsing."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

from oauth_server.config import get_settings

SCOPE_SEPARATOR = " "


class ScopeParseError(ValueError):
    """Raised when a requested scope string is malformed or unknown."""


@dataclass(frozen=True, order=True)
class Scope:
    """A single scope name drawn from the registry.

    Instances are produced by `ScopeRegistry`; code outside this module should
    never build one from request input directly.
    """

    name: str

    def __str__(self) -> str:
        return self.name


class ScopeRegistry:
    """Fixed set of known scope names."""

    def __init__(self, names: Iterable[str]) -> None:
        self._scopes = {name: Scope(name) for name in names}

    @property
    def names(self) -> frozenset[str]:
        """Return all registered scope names."""
        return frozenset(self._scopes)

    def is_valid(self, name: str) -> bool:
        """Return True when the name is a registered scope."""
        return name in self._scopes

    def get(self, name: str) -> Scope:
        """Return the registered scope for a name or raise `ScopeParseError`."""
        scope = self._scopes.get(name)
        if scope is None:
            raise ScopeParseError("defined but invalid scope provided")
        return scope

    def parse(self, raw: str | None) -> frozenset[Scope] | None:
        """Parse a space-delimited scope string.

        `None` means no scope was requested and yields `None`. Duplicate names
        are rejected rather than collapsed, since the set result would
        otherwise hide them.
        """
        if raw is None:
            return None
        if raw == "":
            raise ScopeParseError("defined but empty scopes")

        tokens = [token.strip() for token in raw.split(SCOPE_SEPARATOR)]
        tokens = [token for token in tokens if token]
        if not tokens:
            raise ScopeParseError("defined but blank scopes")

        if not all(self.is_valid(token) for token in tokens):
            raise ScopeParseError("defined but invalid scope provided")

        scopes = frozenset(self._scopes[token] for token in tokens)
        if len(scopes) != len(tokens):
            raise ScopeParseError("defined but duplicate scope provided")
        return scopes


def format_scopes(scopes: Iterable[Scope]) -> str:
    """Render scopes as a space-delimited string in a stable order."""
    return SCOPE_SEPARATOR.join(sorted(scope.name for scope in scopes))


@lru_cache
def get_scope_registry() -> ScopeRegistry:
    """Build and cache the scope registry from settings."""
    return ScopeRegistry(get_settings().scopes.valid_scopes)


def parse_scopes(raw: str | None, registry: ScopeRegistry | None = None) -> frozenset[Scope] | None:
    """Parse scopes against the given registry, defaulting to the configured one."""
    return (registry or get_scope_registry()).parse(raw)
