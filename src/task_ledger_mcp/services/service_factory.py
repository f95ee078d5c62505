"""
Service Factory - Dependency injection for services.

Wires one document store per factory into every repository and service, so
the store handle is an explicit constructor dependency everywhere below the
outer surfaces.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Optional

from task_ledger_mcp.database.document_store import DocumentStore
from task_ledger_mcp.database.orm_manager import ORMManager, get_orm_manager
from task_ledger_mcp.database.repositories import (
    ProjectRepository,
    TagRepository,
    TaskRepository,
    UserRepository,
)

if TYPE_CHECKING:
    from task_ledger_mcp.services.aggregate_service import AggregateService
    from task_ledger_mcp.services.bulk_processor import BulkProcessor
    from task_ledger_mcp.services.cascade_service import CascadeService
    from task_ledger_mcp.services.project_service import ProjectService
    from task_ledger_mcp.services.tag_service import TagService
    from task_ledger_mcp.services.task_service import TaskService
    from task_ledger_mcp.services.user_service import UserService

# Module-level singleton
_global_factory: Optional["ServiceFactory"] = None
_global_lock = threading.Lock()


def get_service_factory(orm_manager: Optional[ORMManager] = None) -> "ServiceFactory":
    """
    Get the singleton service factory instance.

    Args:
        orm_manager: Optional ORM manager instance. Uses singleton if not provided.

    Returns:
        ServiceFactory singleton instance.
    """
    global _global_factory

    with _global_lock:
        if _global_factory is None:
            _global_factory = ServiceFactory(orm_manager)
        return _global_factory


def reset_service_factory() -> None:
    """Reset the global service factory (for testing)."""
    global _global_factory

    with _global_lock:
        _global_factory = None


class ServiceFactory:
    """
    Factory for creating service instances with dependency injection.

    Creates and caches service instances, ensuring they share the same
    document store and repositories.
    """

    def __init__(
        self,
        orm_manager: Optional[ORMManager] = None,
        store: Optional[DocumentStore] = None,
    ):
        """
        Initialize the service factory.

        Args:
            orm_manager: ORM manager instance. Uses singleton if not provided.
            store: Document store to share. Built on the ORM manager if not provided.
        """
        self._orm_manager = orm_manager or get_orm_manager()
        self._store = store or DocumentStore(self._orm_manager)
        self._lock = threading.RLock()  # RLock allows reentrant locking

        self._task_repo = TaskRepository(self._store)
        self._project_repo = ProjectRepository(self._store)
        self._tag_repo = TagRepository(self._store)
        self._user_repo = UserRepository(self._store)

        # Service cache
        self._aggregate_service: Optional["AggregateService"] = None
        self._cascade_service: Optional["CascadeService"] = None
        self._task_service: Optional["TaskService"] = None
        self._project_service: Optional["ProjectService"] = None
        self._tag_service: Optional["TagService"] = None
        self._user_service: Optional["UserService"] = None
        self._bulk_processor: Optional["BulkProcessor"] = None

    @property
    def orm_manager(self) -> ORMManager:
        """Get the ORM manager."""
        return self._orm_manager

    @property
    def store(self) -> DocumentStore:
        """Get the shared document store."""
        return self._store

    def get_aggregate_service(self) -> "AggregateService":
        """Get or create the aggregate maintenance service."""
        from task_ledger_mcp.services.aggregate_service import AggregateService

        with self._lock:
            if self._aggregate_service is None:
                self._aggregate_service = AggregateService(self._store)
            return self._aggregate_service

    def get_cascade_service(self) -> "CascadeService":
        """Get or create the cascade engine."""
        from task_ledger_mcp.services.cascade_service import CascadeService

        with self._lock:
            if self._cascade_service is None:
                self._cascade_service = CascadeService(
                    store=self._store,
                    task_repo=self._task_repo,
                    project_repo=self._project_repo,
                    tag_repo=self._tag_repo,
                    user_repo=self._user_repo,
                    aggregate=self.get_aggregate_service(),
                )
            return self._cascade_service

    def get_task_service(self) -> "TaskService":
        """Get or create the task service."""
        from task_ledger_mcp.services.task_service import TaskService

        with self._lock:
            if self._task_service is None:
                self._task_service = TaskService(
                    task_repo=self._task_repo,
                    project_repo=self._project_repo,
                    aggregate=self.get_aggregate_service(),
                    cascade=self.get_cascade_service(),
                )
            return self._task_service

    def get_project_service(self) -> "ProjectService":
        """Get or create the project service."""
        from task_ledger_mcp.services.project_service import ProjectService

        with self._lock:
            if self._project_service is None:
                self._project_service = ProjectService(
                    project_repo=self._project_repo,
                    aggregate=self.get_aggregate_service(),
                    cascade=self.get_cascade_service(),
                )
            return self._project_service

    def get_tag_service(self) -> "TagService":
        """Get or create the tag service."""
        from task_ledger_mcp.services.tag_service import TagService

        with self._lock:
            if self._tag_service is None:
                self._tag_service = TagService(
                    tag_repo=self._tag_repo,
                    aggregate=self.get_aggregate_service(),
                    cascade=self.get_cascade_service(),
                )
            return self._tag_service

    def get_user_service(self) -> "UserService":
        """Get or create the user service."""
        from task_ledger_mcp.services.user_service import UserService

        with self._lock:
            if self._user_service is None:
                self._user_service = UserService(
                    user_repo=self._user_repo, cascade=self.get_cascade_service()
                )
            return self._user_service

    def get_bulk_processor(self) -> "BulkProcessor":
        """Get or create the bulk command processor."""
        from task_ledger_mcp.services.bulk_processor import BulkProcessor

        with self._lock:
            if self._bulk_processor is None:
                self._bulk_processor = BulkProcessor(self.get_task_service())
            return self._bulk_processor
