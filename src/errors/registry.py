"""Error code registry with E-XXXX format codes.

This module defines the error code system for RDI Quote, organizing errors
into categories:
- E-2xxx: Request validation errors
- E-3xxx: Address verification provider errors
- E-4xxx: System/internal errors
- E-5xxx: Authentication errors

Each error includes a code, title, message template, and the HTTP status the
API maps it to.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error codes."""

    VALIDATION = "validation"  # E-2xxx: Request validation errors
    PROVIDER = "provider"  # E-3xxx: Verification provider errors
    SYSTEM = "system"  # E-4xxx: System/internal errors
    AUTH = "auth"  # E-5xxx: Authentication errors


@dataclass(frozen=True)
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        category: Error category for grouping.
        title: Short title for display and notifications.
        message_template: Message with {placeholders} for context.
        http_status: Status code returned when the error is surfaced.
    """

    code: str
    category: ErrorCategory
    title: str
    message_template: str
    http_status: int = 500


ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Validation errors (E-2xxx)
    "E-2001": ErrorCode(
        code="E-2001",
        category=ErrorCategory.VALIDATION,
        title="Missing Address",
        message_template="Missing address in request body.",
        http_status=400,
    ),
    "E-2002": ErrorCode(
        code="E-2002",
        category=ErrorCategory.VALIDATION,
        title="Missing Required Address Fields",
        message_template="Missing required address fields: {fields}.",
        http_status=400,
    ),
    "E-2003": ErrorCode(
        code="E-2003",
        category=ErrorCategory.VALIDATION,
        title="Invalid JSON Body",
        message_template="Invalid JSON body.",
        http_status=400,
    ),
    # Provider errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.PROVIDER,
        title="Verification Provider Unreachable",
        message_template="Address verification request failed: {reason}",
    ),
    "E-3002": ErrorCode(
        code="E-3002",
        category=ErrorCategory.PROVIDER,
        title="Malformed Provider Response",
        message_template="Address verification provider returned an unreadable response: {reason}",
    ),
    "E-3003": ErrorCode(
        code="E-3003",
        category=ErrorCategory.PROVIDER,
        title="Provider Credential Missing",
        message_template="Address verification provider API key is not configured.",
    ),
    # System errors (E-4xxx)
    "E-4001": ErrorCode(
        code="E-4001",
        category=ErrorCategory.SYSTEM,
        title="Unexpected Error",
        message_template="Unexpected error: {reason}",
    ),
    "E-4002": ErrorCode(
        code="E-4002",
        category=ErrorCategory.SYSTEM,
        title="Notification Dispatch Failed",
        message_template="Notification webhook dispatch failed: {reason}",
    ),
    # Auth errors (E-5xxx)
    "E-5001": ErrorCode(
        code="E-5001",
        category=ErrorCategory.AUTH,
        title="Invalid API Key",
        message_template="Invalid or missing API key.",
        http_status=401,
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Get error definition by code.

    Args:
        code: Error code in E-XXXX format.

    Returns:
        ErrorCode if found, None otherwise.
    """
    return ERROR_REGISTRY.get(code)


def get_errors_by_category(category: ErrorCategory) -> list[ErrorCode]:
    """Get all errors in a category.

    Args:
        category: The error category to filter by.

    Returns:
        List of ErrorCode objects in the specified category.
    """
    return [e for e in ERROR_REGISTRY.values() if e.category == category]


def format_message(code: str, **context: object) -> str:
    """Render the message template for a code.

    Missing placeholders leave the template untouched rather than failing.

    Args:
        code: Error code in E-XXXX format.
        **context: Values for the template placeholders.

    Returns:
        Formatted message, or a generic message for unknown codes.
    """
    error_def = get_error(code)
    if not error_def:
        return f"Unknown error: {code}"
    try:
        return error_def.message_template.format(**context)
    except KeyError:
        return error_def.message_template
