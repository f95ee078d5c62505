"""User Service - The user record and whole-account deletion."""

import logging
from typing import Any, Dict, Optional

from task_ledger_mcp.database.repositories import UserRepository
from task_ledger_mcp.domain.entities.result_types import (
    DomainError,
    DomainResult,
    DomainSuccess,
)
from task_ledger_mcp.services.cascade_service import CascadeService
from task_ledger_mcp.services.guards import domain_operation

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"email", "name", "image"})


class UserService:
    """Service for the user record."""

    def __init__(self, user_repo: UserRepository, cascade: CascadeService):
        self.user_repo = user_repo
        self.cascade = cascade

    @domain_operation("get_user")
    def get_user(self, user_id: str) -> DomainResult[Optional[Dict[str, Any]]]:
        user = self.user_repo.get(user_id)
        return DomainSuccess.create(data=user.to_dict() if user else None)

    @domain_operation("create_user")
    def create_user(
        self,
        user_id: str,
        email: str,
        name: Optional[str] = None,
        image: Optional[str] = None,
    ) -> DomainResult[Dict[str, Any]]:
        """Create (or overwrite the profile of) the user record."""
        email = (email or "").strip()
        if not email:
            return DomainError.validation_error("Email cannot be empty")
        user = self.user_repo.put(user_id, {"email": email, "name": name, "image": image})
        return DomainSuccess.create(data=user.to_dict())

    @domain_operation("update_user")
    def update_user(
        self, user_id: str, changes: Dict[str, Any]
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            return DomainError.validation_error(
                f"Unknown user fields: {sorted(unknown)}",
                details={"valid_fields": sorted(EDITABLE_FIELDS)},
            )
        if "email" in changes and not (changes["email"] or "").strip():
            return DomainError.validation_error("Email cannot be empty")
        if not self.user_repo.write(user_id, dict(changes)):
            return DomainSuccess.create(data=None)
        return self.get_user(user_id)

    @domain_operation("delete_user")
    def delete_user(self, user_id: str, soft: bool = True) -> DomainResult[Dict[str, Any]]:
        """
        Delete or soft-delete the user and every project, tag and task they own.

        Returns:
            DomainResult with per-collection counts of swept documents.
        """
        return DomainSuccess.create(data=self.cascade.delete_user(user_id, soft))
