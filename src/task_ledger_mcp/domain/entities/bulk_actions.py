"""
Bulk Action Variants.

A closed set of task actions accepted by the bulk command processor. Raw
payloads (``{"op": "...", ...}``) are parsed into exactly one variant; an
unknown op or a missing id is rejected before anything runs.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from task_ledger_mcp.domain.entities.task import UNSET


class BulkActionError(ValueError):
    """A bulk action payload could not be parsed."""


@dataclass(frozen=True)
class CreateAction:
    data: Dict[str, Any] = field(default_factory=dict)
    op: str = field(default="create", init=False)


@dataclass(frozen=True)
class UpdateAction:
    id: str
    data: Dict[str, Any] = field(default_factory=dict)
    op: str = field(default="update", init=False)


@dataclass(frozen=True)
class DeleteAction:
    id: str
    op: str = field(default="delete", init=False)


@dataclass(frozen=True)
class SoftDeleteAction:
    id: str
    op: str = field(default="softDelete", init=False)


@dataclass(frozen=True)
class RestoreAction:
    id: str
    op: str = field(default="restore", init=False)


@dataclass(frozen=True)
class MoveAction:
    id: str
    project_id: Any = UNSET
    parent_id: Any = UNSET
    order: Optional[int] = None
    op: str = field(default="move", init=False)


@dataclass(frozen=True)
class ReorderAction:
    id: str
    order: int
    op: str = field(default="reorder", init=False)


@dataclass(frozen=True)
class ArchiveAction:
    id: str
    op: str = field(default="archive", init=False)


@dataclass(frozen=True)
class UnarchiveAction:
    id: str
    op: str = field(default="unarchive", init=False)


@dataclass(frozen=True)
class CompleteAction:
    id: str
    op: str = field(default="complete", init=False)


@dataclass(frozen=True)
class UncompleteAction:
    id: str
    op: str = field(default="uncomplete", init=False)


BulkAction = Union[
    CreateAction,
    UpdateAction,
    DeleteAction,
    SoftDeleteAction,
    RestoreAction,
    MoveAction,
    ReorderAction,
    ArchiveAction,
    UnarchiveAction,
    CompleteAction,
    UncompleteAction,
]


def _require_id(payload: Dict[str, Any]) -> str:
    task_id = payload.get("id")
    if not isinstance(task_id, str) or not task_id:
        raise BulkActionError(f"Action '{payload.get('op')}' requires a task id")
    return task_id


def _require_order(payload: Dict[str, Any]) -> int:
    order = payload.get("order")
    if isinstance(order, bool) or not isinstance(order, int) or order < 0:
        raise BulkActionError("Action 'reorder' requires a non-negative integer order")
    return order


def _data(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = payload.get("data") or {}
    if not isinstance(data, dict):
        raise BulkActionError(f"Action '{payload.get('op')}' data must be a mapping")
    return dict(data)


def _parse_move(payload: Dict[str, Any]) -> MoveAction:
    order = payload.get("order")
    if order is not None and (isinstance(order, bool) or not isinstance(order, int) or order < 0):
        raise BulkActionError("Action 'move' order must be a non-negative integer")
    return MoveAction(
        id=_require_id(payload),
        project_id=payload["project_id"] if "project_id" in payload else UNSET,
        parent_id=payload["parent_id"] if "parent_id" in payload else UNSET,
        order=order,
    )


_PARSERS: Dict[str, Callable[[Dict[str, Any]], BulkAction]] = {
    "create": lambda p: CreateAction(data=_data(p)),
    "update": lambda p: UpdateAction(id=_require_id(p), data=_data(p)),
    "delete": lambda p: DeleteAction(id=_require_id(p)),
    "softDelete": lambda p: SoftDeleteAction(id=_require_id(p)),
    "restore": lambda p: RestoreAction(id=_require_id(p)),
    "move": _parse_move,
    "reorder": lambda p: ReorderAction(id=_require_id(p), order=_require_order(p)),
    "archive": lambda p: ArchiveAction(id=_require_id(p)),
    "unarchive": lambda p: UnarchiveAction(id=_require_id(p)),
    "complete": lambda p: CompleteAction(id=_require_id(p)),
    "uncomplete": lambda p: UncompleteAction(id=_require_id(p)),
}

BULK_OPS = tuple(_PARSERS)


def parse_bulk_action(payload: Dict[str, Any]) -> BulkAction:
    """Parse one raw action payload into its variant.

    Raises:
        BulkActionError: Unknown op or malformed payload.
    """
    if not isinstance(payload, dict):
        raise BulkActionError("Each action must be a mapping")
    op = payload.get("op")
    parser = _PARSERS.get(op) if isinstance(op, str) else None
    if parser is None:
        raise BulkActionError(f"Unknown bulk op: {op!r}. Expected one of {list(BULK_OPS)}")
    return parser(payload)


def parse_bulk_actions(payloads: List[Dict[str, Any]]) -> List[BulkAction]:
    """Parse every action up front; raises on the first malformed one."""
    actions = []
    for index, payload in enumerate(payloads):
        try:
            actions.append(parse_bulk_action(payload))
        except BulkActionError as e:
            raise BulkActionError(f"Action {index}: {e}") from e
    return actions
