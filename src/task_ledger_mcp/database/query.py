"""
Query evaluation for the document store.

Filters, ordering and cursors are evaluated over decoded document bodies. Values
of different types order by type first (null, booleans, numbers, strings,
arrays, maps), the way hierarchical document stores order mixed fields, and the
document id is always the final tiebreaker so pagination is stable.
"""

import functools
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from task_ledger_mcp.database.models.base import encode_value

# Pseudo field naming the document id in filters and ordering.
DOCUMENT_ID = "__name__"

WhereClause = Tuple[str, str, Any]
OrderClause = Tuple[str, str]

WHERE_OPERATORS = frozenset(
    {"==", "!=", "<", "<=", ">", ">=", "in", "not-in", "array-contains", "array-contains-any"}
)

_MISSING = object()


class QueryError(ValueError):
    """Raised for malformed queries (unknown operator, bad cursor)."""


def _type_rank(value: Any) -> int:
    if value is None or value is _MISSING:
        return 0
    if isinstance(value, bool):
        return 1
    if isinstance(value, (int, float)):
        return 2
    if isinstance(value, str):
        return 3
    if isinstance(value, list):
        return 4
    return 5


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison with cross-type ordering."""
    rank_a, rank_b = _type_rank(a), _type_rank(b)
    if rank_a != rank_b:
        return -1 if rank_a < rank_b else 1
    if rank_a == 0:
        return 0
    if rank_a == 4:
        for item_a, item_b in zip(a, b):
            result = compare_values(item_a, item_b)
            if result:
                return result
        return (len(a) > len(b)) - (len(a) < len(b))
    if rank_a == 5:
        a, b = sorted(a.items()), sorted(b.items())
        return compare_values([list(i) for i in a], [list(i) for i in b])
    return (a > b) - (a < b)


def get_field(doc_id: str, data: Dict[str, Any], field: str) -> Any:
    """Resolve a (possibly dotted) field of a document, or the id pseudo-field."""
    if field == DOCUMENT_ID:
        return doc_id
    value: Any = data
    for part in field.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _comparable(a: Any, b: Any) -> bool:
    return _type_rank(a) == _type_rank(b) and _type_rank(a) not in (0, 4, 5)


def _matches_clause(actual: Any, op: str, expected: Any) -> bool:
    if actual is _MISSING:
        actual = None

    if op == "==":
        return compare_values(actual, expected) == 0
    if op == "!=":
        return actual is not None and compare_values(actual, expected) != 0
    if op in ("<", "<=", ">", ">="):
        if not _comparable(actual, expected):
            return False
        result = compare_values(actual, expected)
        return {
            "<": result < 0,
            "<=": result <= 0,
            ">": result > 0,
            ">=": result >= 0,
        }[op]
    if op == "in":
        return any(compare_values(actual, v) == 0 for v in expected)
    if op == "not-in":
        return actual is not None and all(compare_values(actual, v) != 0 for v in expected)
    if op == "array-contains":
        return isinstance(actual, list) and any(compare_values(v, expected) == 0 for v in actual)
    if op == "array-contains-any":
        return isinstance(actual, list) and any(
            compare_values(v, e) == 0 for v in actual for e in expected
        )
    raise QueryError(f"Unsupported where operator: {op!r}")


def normalize_where(where: Optional[Iterable[Sequence[Any]]]) -> List[WhereClause]:
    """Validate where clauses and encode their values into stored form."""
    clauses: List[WhereClause] = []
    for clause in where or []:
        if len(clause) != 3:
            raise QueryError(f"Where clause must be (field, op, value): {clause!r}")
        field, op, value = clause
        if op not in WHERE_OPERATORS:
            raise QueryError(f"Unsupported where operator: {op!r}")
        if op in ("in", "not-in", "array-contains-any") and not isinstance(
            value, (list, tuple, set)
        ):
            raise QueryError(f"Operator {op!r} requires a list value")
        clauses.append((field, op, encode_value(value)))
    return clauses


def normalize_order_by(order_by: Optional[Iterable[Sequence[str]]]) -> List[OrderClause]:
    """Validate ordering and append the implicit document-id tiebreaker."""
    clauses: List[OrderClause] = []
    for clause in order_by or []:
        field = clause[0]
        direction = (clause[1] if len(clause) > 1 and clause[1] else "asc").lower()
        if direction not in ("asc", "desc"):
            raise QueryError(f"Unsupported order direction: {direction!r}")
        clauses.append((field, direction))
    if not any(field == DOCUMENT_ID for field, _ in clauses):
        clauses.append((DOCUMENT_ID, "asc"))
    return clauses


def matches(doc_id: str, data: Dict[str, Any], where: Sequence[WhereClause]) -> bool:
    """Check a document against every where clause."""
    return all(
        _matches_clause(get_field(doc_id, data, field), op, value) for field, op, value in where
    )


def document_comparator(
    order_by: Sequence[OrderClause],
) -> Callable[[Tuple[str, Dict[str, Any]], Tuple[str, Dict[str, Any]]], int]:
    """Build a comparator over (doc_id, data) pairs for the given ordering."""

    def compare(left: Tuple[str, Dict[str, Any]], right: Tuple[str, Dict[str, Any]]) -> int:
        for field, direction in order_by:
            result = compare_values(
                get_field(left[0], left[1], field), get_field(right[0], right[1], field)
            )
            if result:
                return -result if direction == "desc" else result
        return 0

    return compare


def sort_documents(
    docs: List[Tuple[str, Dict[str, Any]]], order_by: Sequence[OrderClause]
) -> List[Tuple[str, Dict[str, Any]]]:
    """Sort (doc_id, data) pairs by the given ordering."""
    return sorted(docs, key=functools.cmp_to_key(document_comparator(order_by)))


def apply_cursor(
    docs: List[Tuple[str, Dict[str, Any]]],
    order_by: Sequence[OrderClause],
    cursor: Tuple[str, Dict[str, Any]],
) -> List[Tuple[str, Dict[str, Any]]]:
    """Keep only the documents ordered strictly after the cursor document."""
    compare = document_comparator(order_by)
    return [doc for doc in docs if compare(doc, cursor) > 0]


def project_fields(data: Dict[str, Any], select: Optional[Sequence[str]]) -> Dict[str, Any]:
    """Restrict a document body to the selected fields."""
    if not select:
        return dict(data)
    return {field: data[field] for field in select if field in data}
