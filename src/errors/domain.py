"""Typed domain exceptions for API error mapping.

Each exception carries an E-XXXX code from the registry. Routes and the
pipeline catch specific exception types to pick the HTTP status code or the
fallback behaviour of the active integration mode.

Usage:
    # In service layer
    raise ValidationError("E-2002", fields="city, zip")

    # In pipeline
    try:
        result = await verifier.verify(address)
    except ProviderError as e:
        return build_fallback_quote(e)
"""

from src.errors.registry import format_message, get_error


class DomainError(Exception):
    """Base exception for all domain errors."""

    default_code = "E-4001"

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        details: dict | None = None,
        **context: object,
    ) -> None:
        self.code = code or self.default_code
        self.message = message or format_message(self.code, **context)
        self.details = details or {}
        super().__init__(self.message)

    @property
    def title(self) -> str:
        """Short registry title for notifications."""
        error_def = get_error(self.code)
        return error_def.title if error_def else "Error"

    @property
    def http_status(self) -> int:
        """HTTP status the API maps this error to."""
        error_def = get_error(self.code)
        return error_def.http_status if error_def else 500

    def __str__(self) -> str:
        """Return formatted error message."""
        return f"[{self.code}] {self.message}"


class ValidationError(DomainError):
    """Malformed or missing input. Maps to HTTP 400."""

    default_code = "E-2002"


class AuthError(DomainError):
    """Credential mismatch on a gated route. Maps to HTTP 401."""

    default_code = "E-5001"


class ProviderError(DomainError):
    """Transport failure or unreadable body from the verification provider."""

    default_code = "E-3001"


class SinkDispatchError(DomainError):
    """Notification webhook dispatch failed. Logged, never surfaced."""

    default_code = "E-4002"
