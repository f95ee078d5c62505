"""
Project Service - Business logic for project operations.

Project counters are read-only here: they change only through the aggregate
service's increments or an explicit recount.
"""

import logging
from typing import Any, Dict, List, Optional

from task_ledger_mcp.database.repositories import ProjectRepository
from task_ledger_mcp.domain.entities.result_types import (
    DomainError,
    DomainResult,
    DomainSuccess,
)
from task_ledger_mcp.services.aggregate_service import AggregateService
from task_ledger_mcp.services.cascade_service import CascadeService
from task_ledger_mcp.services.guards import domain_operation

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "color", "order"})


def validate_name_and_order(values: Dict[str, Any]) -> Optional[DomainResult[Any]]:
    if "name" in values:
        name = (values["name"] or "").strip()
        if not name:
            return DomainError.validation_error("Name cannot be empty or whitespace")
        values["name"] = name
    if "order" in values:
        order = values["order"]
        if isinstance(order, bool) or not isinstance(order, int) or order < 0:
            return DomainError.validation_error("Order must be a non-negative integer")
    return None


class ProjectService:
    """Service for project business logic."""

    def __init__(
        self,
        project_repo: ProjectRepository,
        aggregate: AggregateService,
        cascade: CascadeService,
    ):
        """Initialize service with the project repository and cascade engine."""
        self.project_repo = project_repo
        self.aggregate = aggregate
        self.cascade = cascade

    @domain_operation("create_project")
    def create_project(
        self,
        user_id: str,
        name: str,
        color: Optional[str] = None,
        order: Optional[int] = None,
    ) -> DomainResult[Dict[str, Any]]:
        """
        Create a new project with zeroed counters.

        Args:
            user_id: Owning user id.
            name: Project name.
            color: Optional display color.
            order: Ordering among the user's projects (defaults to 0).

        Returns:
            DomainResult with created project data.
        """
        values: Dict[str, Any] = {"name": name, "color": color, "order": order or 0}
        error = validate_name_and_order(values)
        if error:
            return error

        project = self.project_repo.create(
            user_id, {**values, "task_count": 0, "open_count": 0, "deleted_at": None}
        )
        logger.debug("Created project %s for user %s", project.id, user_id)
        return DomainSuccess.create(data=project.to_dict())

    @domain_operation("get_project")
    def get_project(self, user_id: str, project_id: str) -> DomainResult[Optional[Dict[str, Any]]]:
        project = self.project_repo.get(user_id, project_id)
        return DomainSuccess.create(data=project.to_dict() if project else None)

    @domain_operation("list_projects")
    def list_projects(
        self, user_id: str, include_deleted: bool = False
    ) -> DomainResult[List[Dict[str, Any]]]:
        """List projects ordered by ``order`` then creation time."""
        projects = self.project_repo.list_ordered(user_id)
        if not include_deleted:
            projects = [p for p in projects if p.deleted_at is None]
        return DomainSuccess.create(data=[p.to_dict() for p in projects])

    @domain_operation("update_project")
    def update_project(
        self, user_id: str, project_id: str, changes: Dict[str, Any]
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """Update name, color or order. Counters cannot be edited directly."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            return DomainError.validation_error(
                f"Unknown or read-only project fields: {sorted(unknown)}",
                details={"valid_fields": sorted(EDITABLE_FIELDS)},
            )
        values = dict(changes)
        error = validate_name_and_order(values)
        if error:
            return error

        if not self.project_repo.write(user_id, project_id, values):
            return DomainSuccess.create(data=None)
        return self.get_project(user_id, project_id)

    def reorder_project(
        self, user_id: str, project_id: str, order: int
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        return self.update_project(user_id, project_id, {"order": order})

    @domain_operation("remove_project")
    def remove_project(
        self, user_id: str, project_id: str, soft: bool = True
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """
        Delete or soft-delete a project and all of its tasks.

        Returns:
            DomainResult with the cascade summary, or None if the project does not exist.
        """
        return DomainSuccess.create(data=self.cascade.delete_project(user_id, project_id, soft))

    @domain_operation("recount_project")
    def recount_project(
        self, user_id: str, project_id: str
    ) -> DomainResult[Optional[Dict[str, Any]]]:
        """Recompute ``task_count`` and ``open_count`` from the project's tasks."""
        if self.aggregate.reconcile_project(user_id, project_id) is None:
            return DomainSuccess.create(data=None)
        return self.get_project(user_id, project_id)
