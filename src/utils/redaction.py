"""Secret redaction for log lines and caller-facing error details.

The provider credential and the webhook URL are the only secrets this
service holds; both can surface in httpx exception text or in a dumped
configuration, so everything logged or returned passes through here.
"""

import re
from collections.abc import Mapping
from typing import Any

_REDACTED = "***REDACTED***"

# Case-insensitive substrings that mark a mapping key as secret
_SENSITIVE_KEY_PARTS = frozenset({
    "api_key", "apikey", "authorization", "secret", "token",
    "password", "webhook_url", "x-api-key",
})

_SENSITIVE_TEXT = re.compile(
    r"(?i)"
    r"(?:"
    # Authorization: Bearer <key>
    r"bearer\s+[A-Za-z0-9._\-]+"
    r"|"
    # EasyPost keys (test and production prefixes)
    r"\bEZ[AT]K[A-Za-z0-9]+"
    r"|"
    # Slack incoming webhook paths
    r"hooks\.slack\.com/services/\S+"
    r"|"
    # api_key=value, "api_key": "value"
    r"\"?(?:api_key|apikey|token|secret|password)\"?\s*[=:]\s*\"?[^\s\",}]+\"?"
    r")"
)


def is_sensitive_key(key: str) -> bool:
    """Return True when a mapping key names a secret value."""
    key_lower = key.lower()
    return any(part in key_lower for part in _SENSITIVE_KEY_PARTS)


def redact_for_logging(obj: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``obj`` with secret values replaced.

    Nested mappings and lists of mappings are walked recursively. The input
    is never mutated.
    """
    result: dict[str, Any] = {}
    for key, value in obj.items():
        if is_sensitive_key(str(key)):
            result[key] = _REDACTED if value else value
        elif isinstance(value, Mapping):
            result[key] = redact_for_logging(value)
        elif isinstance(value, list):
            result[key] = [
                redact_for_logging(item) if isinstance(item, Mapping) else item
                for item in value
            ]
        else:
            result[key] = value
    return result


def sanitize_error_message(msg: str | None, max_length: int = 500) -> str | None:
    """Redact credential-looking fragments and truncate.

    Args:
        msg: Error text (None passes through).
        max_length: Maximum length of the returned text.

    Returns:
        Sanitized message, or None.
    """
    if msg is None:
        return None
    sanitized = _SENSITIVE_TEXT.sub(_REDACTED, msg)
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length - 3] + "..."
    return sanitized
