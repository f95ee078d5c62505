"""Pytest configuration and fixtures."""

import contextlib
import os
import shutil
import tempfile
from typing import Generator

import pytest

from task_ledger_mcp.database.document_store import DocumentStore
from task_ledger_mcp.database.orm_manager import ORMManager, reset_orm_manager
from task_ledger_mcp.services.service_factory import ServiceFactory, reset_service_factory

USER_ID = "u1"


@pytest.fixture(scope="function", autouse=True)
def reset_singletons():
    """Reset singletons and set up test database before each test."""
    # Create a unique temp database for this test
    tmpdir = tempfile.mkdtemp()
    db_path = os.path.join(tmpdir, "test.db")

    # Store old env var
    old_db_path = os.environ.get("LEDGER_DB_PATH")

    # Set env var BEFORE resetting singletons
    os.environ["LEDGER_DB_PATH"] = db_path

    # Now reset singletons - they will pick up the test database path
    reset_orm_manager()
    reset_service_factory()

    yield

    # Cleanup after test
    reset_orm_manager()
    reset_service_factory()

    # Restore old env var
    if old_db_path is not None:
        os.environ["LEDGER_DB_PATH"] = old_db_path
    elif "LEDGER_DB_PATH" in os.environ:
        del os.environ["LEDGER_DB_PATH"]

    # Clean up temp directory
    with contextlib.suppress(Exception):
        shutil.rmtree(tmpdir)


@pytest.fixture
def temp_db_path() -> Generator[str, None, None]:
    """Get the test database path."""
    # Return the path set by reset_singletons fixture
    yield os.environ["LEDGER_DB_PATH"]


@pytest.fixture
def orm_manager(temp_db_path: str) -> Generator[ORMManager, None, None]:
    """Create an ORM manager with a temporary database."""
    manager = ORMManager(temp_db_path)
    yield manager
    manager.close()


@pytest.fixture
def store(orm_manager: ORMManager) -> DocumentStore:
    """Create a document store on the temporary database."""
    return DocumentStore(orm_manager)


@pytest.fixture
def factory(orm_manager: ORMManager, store: DocumentStore) -> ServiceFactory:
    """Create a service factory sharing the test store."""
    return ServiceFactory(orm_manager, store)


@pytest.fixture
def uid() -> str:
    return USER_ID


@pytest.fixture
def task_service(factory: ServiceFactory):
    return factory.get_task_service()


@pytest.fixture
def project_service(factory: ServiceFactory):
    return factory.get_project_service()


@pytest.fixture
def tag_service(factory: ServiceFactory):
    return factory.get_tag_service()


@pytest.fixture
def user_service(factory: ServiceFactory):
    return factory.get_user_service()


@pytest.fixture
def aggregate_service(factory: ServiceFactory):
    return factory.get_aggregate_service()


@pytest.fixture
def cascade_service(factory: ServiceFactory):
    return factory.get_cascade_service()


@pytest.fixture
def bulk_processor(factory: ServiceFactory):
    return factory.get_bulk_processor()


@pytest.fixture
def project(project_service, uid):
    """A fresh project with zeroed counters."""
    return project_service.create_project(uid, name="Work").data


@pytest.fixture
def tag(tag_service, uid):
    """A fresh tag with a zero usage count."""
    return tag_service.create_tag(uid, name="urgent").data


@pytest.fixture
def project_counters(project_service, uid):
    """Read ``(task_count, open_count)`` of a project by id."""

    def read(project_id):
        data = project_service.get_project(uid, project_id).data
        return data["task_count"], data["open_count"]

    return read


@pytest.fixture
def tag_usage(tag_service, uid):
    """Read ``usage_count`` of a tag by id."""

    def read(tag_id):
        return tag_service.get_tag(uid, tag_id).data["usage_count"]

    return read
