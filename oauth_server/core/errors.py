"""OAuth error kinds and the exceptions that carry them to the HTTP boundary."""

from __future__ import annotations

from enum import Enum


class OAuthErrorKind(str, Enum):
    """Machine-readable token endpoint error codes (RFC 6749 section 5.2)."""

    INVALID_REQUEST = "invalid_request"
    INVALID_CLIENT = "invalid_client"
    INVALID_GRANT = "invalid_grant"
    INVALID_SCOPE = "invalid_scope"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"


class OAuthError(Exception):
    """Raised when a request must be answered with an OAuth error payload."""

    def __init__(self, detail: str, code: str, status_code: int) -> None:
        super().__init__(detail)
        self.detail = detail
        self.code = code
        self.status_code = status_code


class ClientAuthenticationError(OAuthError):
    """Raised when no client principal could be resolved for a request."""

    def __init__(self, detail: str = "Client authentication failed.") -> None:
        super().__init__(detail, OAuthErrorKind.INVALID_CLIENT.value, 401)


class InvalidRequestError(OAuthError):
    """Raised when the request body cannot be interpreted as a form."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail, OAuthErrorKind.INVALID_REQUEST.value, 400)


class GrantValidationError(Exception):
    """Raised by grant validators on the first failing check."""

    def __init__(self, kind: OAuthErrorKind, description: str) -> None:
        super().__init__(description)
        self.kind = kind
        self.description = description
