"""Tag Service - Business logic for tag operations."""

import logging
from typing import Any, Dict, List, Optional

from task_ledger_mcp.database.repositories import TagRepository
from task_ledger_mcp.domain.entities.result_types import (
    DomainError,
    DomainResult,
    DomainSuccess,
)
from task_ledger_mcp.services.aggregate_service import AggregateService
from task_ledger_mcp.services.cascade_service import CascadeService
from task_ledger_mcp.services.guards import domain_operation
from task_ledger_mcp.services.project_service import validate_name_and_order

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "color", "order"})


class TagService:
    """Service for tag business logic."""

    def __init__(
        self,
        tag_repo: TagRepository,
        aggregate: AggregateService,
        cascade: CascadeService,
    ):
        """Initialize service with the tag repository and cascade engine."""
        self.tag_repo = tag_repo
        self.aggregate = aggregate
        self.cascade = cascade

    @domain_operation("create_tag")
    def create_tag(
        self,
        user_id: str,
        name: str,
        color: Optional[str] = None,
        order: Optional[int] = None,
    ) -> DomainResult[Dict[str, Any]]:
        """Create a new tag with a zero usage count."""
        values: Dict[str, Any] = {"name": name, "color": color, "order": order or 0}
        error = validate_name_and_order(values)
        if error:
            return error

        tag = self.tag_repo.create(user_id, {**values, "usage_count": 0})
        logger.debug("Created tag %s for user %s", tag.id, user_id)
        return DomainSuccess.create(data=tag.to_dict())

    @domain_operation("get_tag")
    def get_tag(self, user_id: str, tag_id: str) -> DomainResult[Optional[Dict[str, Any]]]:
        tag = self.tag_repo.get(user_id, tag_id)
        return DomainSuccess.create(data=tag.to_dict() if tag else None)

    @domain_operation("list_tags")
    def list_tags(self, user_id: str) -> DomainResult[List[Dict[str, Any]]]:
        """List tags ordered by ``order`` then creation time."""
        return DomainSuccess.create(data=[t.to_dict() for t in self.tag_repo.list_ordered(user_id)])

    @domain_operation("update_tag")
    def update_tag(
        self, user_id: str, tag_id: str, changes: Dict[str, Any]
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """Update name, color or order. The usage count cannot be edited directly."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            return DomainError.validation_error(
                f"Unknown or read-only tag fields: {sorted(unknown)}",
                details={"valid_fields": sorted(EDITABLE_FIELDS)},
            )
        values = dict(changes)
        error = validate_name_and_order(values)
        if error:
            return error

        if not self.tag_repo.write(user_id, tag_id, values):
            return DomainSuccess.create(data=None)
        return self.get_tag(user_id, tag_id)

    def reorder_tag(
        self, user_id: str, tag_id: str, order: int
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        return self.update_tag(user_id, tag_id, {"order": order})

    @domain_operation("remove_tag")
    def remove_tag(
        self, user_id: str, tag_id: str, remove_only: bool = True
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """
        Delete a tag.

        Args:
            user_id: Owning user id.
            tag_id: Tag id.
            remove_only: Detach the tag from its tasks (True) or hard-delete
                the tasks that reference it (False).

        Returns:
            DomainResult with the cascade summary, or None if the tag does not exist.
        """
        return DomainSuccess.create(data=self.cascade.delete_tag(user_id, tag_id, remove_only))

    @domain_operation("recount_tag")
    def recount_tag(self, user_id: str, tag_id: str) -> DomainResult[Optional[Dict[str, Any]]]:
        """Recompute ``usage_count`` from the tasks referencing the tag."""
        if self.aggregate.reconcile_tag(user_id, tag_id) is None:
            return DomainSuccess.create(data=None)
        return self.get_tag(user_id, tag_id)
