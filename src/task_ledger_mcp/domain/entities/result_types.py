"""
Domain Result Types.

Every public service operation returns a DomainResult: success with data
(possibly None for a no-op on a missing entity), or a typed failure that the
MCP layer and the CLI render without further interpretation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar


class DomainErrorType(Enum):
    """Types of domain errors."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"
    OPERATION_FAILED = "operation_failed"
    STORE_UNAVAILABLE = "store_unavailable"


T = TypeVar("T")


@dataclass
class DomainResult(Generic[T]):
    """
    Base result type for domain operations.

    Represents either success with data or failure with error information.
    A successful result may carry ``data=None``: lifecycle operations on a
    missing entity are no-ops, not failures.
    """

    success: bool
    data: Optional[T] = None
    error_type: Optional[DomainErrorType] = None
    error_message: Optional[str] = None
    error_details: Dict[str, Any] = field(default_factory=dict)
    suggestions: List[str] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        """Check if result is successful."""
        return self.success

    @property
    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return not self.success

    def get_data_or_raise(self) -> T:
        """Get data or raise exception if failed."""
        if self.is_failure:
            raise ValueError(f"Cannot get data from failed result: {self.error_message}")
        return self.data  # type: ignore


@dataclass
class DomainSuccess(Generic[T]):
    """
    Factory for creating successful domain results.

    Usage:
        result = DomainSuccess.create(data=task)
    """

    @staticmethod
    def create(
        data: Optional[T] = None, suggestions: Optional[List[str]] = None
    ) -> DomainResult[T]:
        """Create a successful domain result."""
        return DomainResult(success=True, data=data, suggestions=suggestions or [])


@dataclass
class DomainError:
    """
    Factory for creating failed domain results.

    Usage:
        result = DomainError.validation_error("Invalid input", details={"field": "name"})
    """

    @staticmethod
    def create(
        error_type: DomainErrorType,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ) -> DomainResult[Any]:
        """Create a failed domain result."""
        return DomainResult(
            success=False,
            error_type=error_type,
            error_message=message,
            error_details=details or {},
            suggestions=suggestions or [],
        )

    @staticmethod
    def validation_error(
        message: str,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ) -> DomainResult[Any]:
        """Create a validation error result."""
        return DomainError.create(
            DomainErrorType.VALIDATION_ERROR,
            message,
            details,
            suggestions or ["Check input format and try again"],
        )

    @staticmethod
    def not_found(
        resource: str, resource_id: str, suggestions: Optional[List[str]] = None
    ) -> DomainResult[Any]:
        """Create a not found error result."""
        return DomainError.create(
            DomainErrorType.NOT_FOUND,
            f"{resource} '{resource_id}' not found",
            {"resource": resource, "id": resource_id},
            suggestions or [f"Verify the {resource.lower()} ID and try again"],
        )

    @staticmethod
    def business_rule_violation(
        rule: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ) -> DomainResult[Any]:
        """Create a business rule violation error result."""
        return DomainError.create(
            DomainErrorType.BUSINESS_RULE_VIOLATION,
            message,
            {**(details or {}), "rule": rule},
            suggestions,
        )

    @staticmethod
    def operation_failed(
        operation: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ) -> DomainResult[Any]:
        """Create an operation failed error result."""
        return DomainError.create(
            DomainErrorType.OPERATION_FAILED,
            f"Operation '{operation}' failed: {reason}",
            {**(details or {}), "operation": operation},
            suggestions,
        )

    @staticmethod
    def store_unavailable(operation: str, reason: str) -> DomainResult[Any]:
        """Create a store unavailable error result.

        The reason is the store's own message, passed through unchanged.
        """
        return DomainError.create(
            DomainErrorType.STORE_UNAVAILABLE,
            f"Document store unavailable during '{operation}': {reason}",
            {"operation": operation, "reason": reason},
            ["Retry the operation once the document store is reachable"],
        )
