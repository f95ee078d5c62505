"""
User Repository.

Users live at the top of the hierarchy (``users/{uid}``), so unlike the other
repositories this one addresses a single document per user.
"""

from typing import Any, Dict, Optional

from task_ledger_mcp.database.exceptions import DocumentMissingError
from task_ledger_mcp.database.paths import StorePaths
from task_ledger_mcp.domain.entities.user import UserDTO
from task_ledger_mcp.domain.interfaces.document_store import IDocumentStore

USER_FIELDS = {"email": "email", "name": "name", "image": "image", "deleted_at": "deletedAt"}


class UserRepository:
    """User repository over ``users/{uid}``."""

    def __init__(self, store: IDocumentStore):
        self.store = store

    def _to_fields(self, values: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(values) - set(USER_FIELDS)
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")
        return {USER_FIELDS[name]: value for name, value in values.items()}

    def get(self, uid: str) -> Optional[UserDTO]:
        doc = self.store.get(StorePaths.user_doc(uid))
        return UserDTO.from_document(doc) if doc is not None else None

    def put(self, uid: str, values: Dict[str, Any]) -> UserDTO:
        """Create or merge the user document and return it as stored."""
        self.store.set(StorePaths.user_doc(uid), self._to_fields(values), merge=True)
        user = self.get(uid)
        if user is None:
            raise DocumentMissingError(StorePaths.user_doc(uid))
        return user

    def write(self, uid: str, changes: Dict[str, Any]) -> bool:
        return self.store.update(StorePaths.user_doc(uid), self._to_fields(changes))

    def delete(self, uid: str) -> bool:
        return self.store.delete(StorePaths.user_doc(uid))
