"""
Field value sentinels resolved by the store at write time.

``Increment`` is the only way counters are changed: the store adds ``n`` to the
current stored value inside the same transaction that writes the document, so
callers never read-modify-write a counter themselves.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Tuple

from task_ledger_mcp.database.models.base import encode_value


@dataclass(frozen=True)
class Increment:
    """Atomically add ``amount`` to a numeric field (missing counts as 0)."""

    amount: int


@dataclass(frozen=True)
class ServerTimestamp:
    """Replaced by the store's commit timestamp."""


@dataclass(frozen=True)
class ArrayUnion:
    """Append values not already present in an array field."""

    values: Tuple[Any, ...]


@dataclass(frozen=True)
class ArrayRemove:
    """Remove every occurrence of the values from an array field."""

    values: Tuple[Any, ...]


SERVER_TIMESTAMP = ServerTimestamp()


def resolve_value(current: Any, value: Any, now: datetime) -> Any:
    """Resolve one (possibly sentinel) value against the stored value."""
    if isinstance(value, Increment):
        base = current if isinstance(current, (int, float)) and not isinstance(current, bool) else 0
        return base + value.amount
    if isinstance(value, ServerTimestamp):
        return encode_value(now)
    if isinstance(value, ArrayUnion):
        result = list(current) if isinstance(current, list) else []
        for item in encode_value(list(value.values)):
            if item not in result:
                result.append(item)
        return result
    if isinstance(value, ArrayRemove):
        removed = encode_value(list(value.values))
        if not isinstance(current, list):
            return []
        return [item for item in current if item not in removed]
    return encode_value(value)


def apply_fields(
    existing: Dict[str, Any], fields: Dict[str, Any], now: datetime, merge: bool = True
) -> Dict[str, Any]:
    """Return the new document body after writing ``fields``.

    With ``merge=False`` the body is replaced, but sentinels still resolve
    against the previous values.
    """
    result = dict(existing) if merge else {}
    for field, value in fields.items():
        result[field] = resolve_value(existing.get(field), value, now)
    return result
