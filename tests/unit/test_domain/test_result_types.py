"""Tests for domain result types."""

import pytest

from task_ledger_mcp.domain.entities.result_types import (
    DomainError,
    DomainErrorType,
    DomainSuccess,
)


class TestDomainResult:
    """Tests for DomainResult."""

    def test_success_result(self):
        """Test creating a success result."""
        result = DomainSuccess.create(data={"id": "123"})

        assert result.success is True
        assert result.is_success is True
        assert result.is_failure is False
        assert result.data == {"id": "123"}
        assert result.error_message is None

    def test_success_with_no_data(self):
        """A no-op on a missing entity is still a success."""
        result = DomainSuccess.create(data=None)

        assert result.is_success
        assert result.data is None

    def test_error_result(self):
        """Test creating an error result."""
        result = DomainError.validation_error("Invalid input")

        assert result.success is False
        assert result.is_success is False
        assert result.is_failure is True
        assert result.error_message == "Invalid input"
        assert result.error_type == DomainErrorType.VALIDATION_ERROR

    def test_not_found_error(self):
        """Test creating a not found error."""
        result = DomainError.not_found("Project", "abc123")

        assert result.is_failure is True
        assert result.error_type == DomainErrorType.NOT_FOUND
        assert "Project" in result.error_message
        assert "abc123" in result.error_message
        assert result.error_details == {"resource": "Project", "id": "abc123"}

    def test_business_rule_violation_records_rule(self):
        result = DomainError.business_rule_violation(
            "no_parent_cycle", "Cycle", {"task_id": "t1"}
        )

        assert result.error_type == DomainErrorType.BUSINESS_RULE_VIOLATION
        assert result.error_details == {"task_id": "t1", "rule": "no_parent_cycle"}

    def test_store_unavailable_passes_reason_through(self):
        result = DomainError.store_unavailable("create_task", "disk I/O error")

        assert result.error_type == DomainErrorType.STORE_UNAVAILABLE
        assert "disk I/O error" in result.error_message
        assert result.error_details["operation"] == "create_task"
        assert result.error_details["reason"] == "disk I/O error"
        assert result.suggestions

    def test_get_data_or_raise_success(self):
        """Test get_data_or_raise with success."""
        result = DomainSuccess.create(data={"value": 42})
        data = result.get_data_or_raise()
        assert data == {"value": 42}

    def test_get_data_or_raise_failure(self):
        """Test get_data_or_raise with failure."""
        result = DomainError.validation_error("Error")
        with pytest.raises(ValueError):
            result.get_data_or_raise()

    def test_operation_failed_names_operation(self):
        result = DomainError.operation_failed("bulk_update", "batch already committed")

        assert result.error_type == DomainErrorType.OPERATION_FAILED
        assert result.error_message == "Operation 'bulk_update' failed: batch already committed"
        assert result.error_details == {"operation": "bulk_update"}
