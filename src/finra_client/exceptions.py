"""Error types raised by the FINRA client.

Every error derives from ``FinraError`` so callers can catch the whole family
at once. The underlying cause (``httpx.HTTPError``, ``csv.Error``, ...) is
always chained via ``raise ... from exc``.
"""

from enum import StrEnum


class FinraError(RuntimeError):
    """Base class for all errors raised by this package."""


class TransportError(FinraError):
    """An HTTP request failed at the transport level or returned an error status."""


class InvalidHeaderError(FinraError):
    """Credential material could not be turned into an HTTP header value."""


class ClientConstructionError(FinraError):
    """An HTTP client could not be built from the configured factory."""


class AuthFailureReason(StrEnum):
    """Why a login attempt against the token endpoint failed."""

    STATUS = "status"
    INVALID_BODY = "invalid_body"
    MISSING_EXPIRY = "missing_expiry"
    INVALID_EXPIRY = "invalid_expiry"
    MISSING_TOKEN = "missing_token"
    INVALID_TOKEN = "invalid_token"


class AuthenticationError(FinraError):
    """The token endpoint refused the credentials or returned an unusable response."""

    def __init__(self, message: str, *, reason: AuthFailureReason, status_code: int | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable description of the failure.
            reason: Machine-readable failure category.
            status_code: HTTP status of the login response, when relevant.

        """
        super().__init__(f"cannot login: {message}")
        self.reason = reason
        self.status_code = status_code


class QuerySerializationError(FinraError):
    """A query could not be turned into a JSON request body."""


class DeserializationError(FinraError):
    """A page body could not be parsed into records."""


__all__ = [
    "AuthFailureReason",
    "AuthenticationError",
    "ClientConstructionError",
    "DeserializationError",
    "FinraError",
    "InvalidHeaderError",
    "QuerySerializationError",
    "TransportError",
]
