"""Error sanitization utilities to prevent credential leakage in status and events."""

import re
from typing import Any

# Patterns whose captured value is replaced
SENSITIVE_PATTERNS = [
    r"access[_\s-]?key(?:[_\s-]?id)?[=:\s]+([A-Za-z0-9]{16,})",
    r"secret[_\s-]?(?:access[_\s-]?)?key[=:\s]+([A-Za-z0-9/+=]{20,})",
    r"Authorization[:\s]+AWS\s+([^\s,;]+)",
    r"Signature[=:\s]+([A-Za-z0-9/+=%]+)",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "access_key",
    "secret_key",
    "access_key_id",
    "secret_access_key",
    "password",
    "credentials",
    "token",
}


def _redact_group(match: re.Match) -> str:
    start, end = match.span(1)
    text = match.group(0)
    offset = match.start(0)
    return text[: start - offset] + "[REDACTED]" + text[end - offset:]


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove credentials.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with key material redacted
    """
    sanitized = message
    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, _redact_group, sanitized, flags=re.IGNORECASE)
    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized dictionary with sensitive values redacted
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        if key.lower().replace("-", "_") in all_sensitive:
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized
