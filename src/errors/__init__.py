"""Error handling framework for RDI Quote.

This package provides:
- Error code registry with E-XXXX format codes
- Typed domain exceptions mapped to HTTP status codes

Error categories:
- E-2xxx: Request validation errors
- E-3xxx: Verification provider errors
- E-4xxx: System/internal errors
- E-5xxx: Authentication errors
"""

from src.errors.domain import (
    AuthError,
    DomainError,
    ProviderError,
    SinkDispatchError,
    ValidationError,
)
from src.errors.registry import (
    ERROR_REGISTRY,
    ErrorCategory,
    ErrorCode,
    format_message,
    get_error,
    get_errors_by_category,
)

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "get_error",
    "get_errors_by_category",
    "format_message",
    # Exceptions
    "DomainError",
    "ValidationError",
    "AuthError",
    "ProviderError",
    "SinkDispatchError",
]
