"""
Error Sanitization for the MCP Server.

Store failures are passed up verbatim by the core, so their text can carry the
SQLite file path or a connection URL. Everything that leaves the process goes
through here first.
"""

import re
from typing import Any, Dict, List, Tuple

# (pattern, replacement), applied in order
_RULES: List[Tuple[str, str]] = [
    (r"(sqlite|postgresql|mysql)(\+\w+)?://[^\s\"']*", "[REDACTED_DB_URL]"),
    (r"(token|api[_-]?key|secret|password)[=:]\s*['\"]?[^\s\"']+['\"]?", "[REDACTED_CREDENTIAL]"),
    (r"bearer\s+[\w\-._]+", "[REDACTED_CREDENTIAL]"),
    (r"[A-Z]:\\[\w\-\\./]+", "[REDACTED_PATH]"),
    # Absolute filesystem paths; document paths (users/u1/tasks/t1) are relative and kept.
    (r"(?<![\w.])/(?:[\w\-.]+/)+[\w\-.]+", "[REDACTED_PATH]"),
]


def sanitize_error_message(message: str) -> str:
    """Remove database URLs, filesystem paths and credentials from a message."""
    sanitized = message
    for pattern, replacement in _RULES:
        sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)
    return sanitized


def sanitize_value(value: Any) -> Any:
    """Recursively sanitize strings inside dicts and lists."""
    if isinstance(value, str):
        return sanitize_error_message(value)
    if isinstance(value, dict):
        return {key: sanitize_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [sanitize_value(item) for item in value]
    return value


def sanitize_exception(exception: Exception) -> str:
    """Render an exception as ``Type: message`` with sensitive parts removed."""
    return f"{type(exception).__name__}: {sanitize_error_message(str(exception))}"


def sanitize_details(details: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize the ``error_details`` of a failed domain result."""
    return sanitize_value(details)
