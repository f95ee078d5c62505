"""
Database Models Base Classes and Utilities.

Shared base class, id/timestamp helpers and JSON encoding for the document table.
"""

import json
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all SQLAlchemy models."""

    pass


def generate_id() -> str:
    """Generate a unique document ID.

    Returns:
        str: 32-character hex UUID4, safe to use as a path segment.
    """
    return uuid.uuid4().hex


def get_current_timestamp() -> datetime:
    """Get current timestamp in UTC.

    Returns:
        datetime: Current UTC timestamp for record creation/updates.
    """
    return datetime.now(timezone.utc)


def encode_value(value: Any) -> Any:
    """Normalize a field value into its stored JSON form.

    Datetimes are stored as UTC ISO-8601 strings so that range filters and
    ordering compare them correctly as strings.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple, set)):
        return [encode_value(v) for v in value]
    if isinstance(value, dict):
        return {k: encode_value(v) for k, v in value.items()}
    return value


class BaseDataProcessor:
    """
    Base data processor for JSON field handling.

    Provides utility methods for safely parsing and dumping the JSON body of a
    document row.
    """

    @staticmethod
    def safe_json_loads(data: Any, fallback: Any = None) -> Any:
        """Safely parse JSON data with fallback handling.

        Args:
            data: JSON string to parse, or None/empty value.
            fallback: Value to return if parsing fails or data is empty.

        Returns:
            Parsed JSON data, or fallback value.
        """
        if not data:
            return fallback if fallback is not None else {}
        try:
            return json.loads(data)
        except (json.JSONDecodeError, TypeError):
            return fallback if fallback is not None else {}

    @staticmethod
    def json_dumps(data: Dict[str, Any]) -> str:
        """Serialize a document body, encoding datetimes on the way."""
        return json.dumps(encode_value(data), sort_keys=True)
