"""Tests for the domain_operation guard."""

from task_ledger_mcp.database.exceptions import (
    BatchLimitExceededError,
    DocumentMissingError,
    StoreUnavailableError,
)
from task_ledger_mcp.database.query import QueryError
from task_ledger_mcp.domain.entities.result_types import DomainErrorType, DomainSuccess
from task_ledger_mcp.services.guards import domain_operation


def guarded(error):
    @domain_operation("sample")
    def operation():
        if error is not None:
            raise error
        return DomainSuccess.create(data="ok")

    return operation


def test_passes_results_through():
    assert guarded(None)().data == "ok"


def test_store_unavailable():
    result = guarded(StoreUnavailableError("get", "database is locked"))()

    assert result.error_type == DomainErrorType.STORE_UNAVAILABLE
    assert result.error_details == {"operation": "sample", "reason": "database is locked"}


def test_query_error_is_validation_error():
    result = guarded(QueryError("Unsupported operator: 'like'"))()

    assert result.error_type == DomainErrorType.VALIDATION_ERROR
    assert result.error_details == {"operation": "sample"}


def test_other_store_errors_are_failed_operations():
    result = guarded(BatchLimitExceededError(500))()

    assert result.error_type == DomainErrorType.OPERATION_FAILED
    assert "at most 500 operations" in result.error_message


def test_malformed_document_path_is_validation_error():
    result = guarded(ValueError("Not a document path: 'users/u1/tasks'"))()

    assert result.error_type == DomainErrorType.VALIDATION_ERROR
    assert result.error_details == {"operation": "sample"}


def test_missing_document_after_write_is_failed_operation():
    result = guarded(DocumentMissingError("users/u1/tasks/t1"))()

    assert result.error_type == DomainErrorType.OPERATION_FAILED
    assert "users/u1/tasks/t1" in result.error_message
