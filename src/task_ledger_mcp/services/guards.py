"""
Service Guards.

Turns the exceptions the store and the query layer raise into domain results,
so every public service operation returns a ``DomainResult``.
"""

import functools
import logging
from typing import Any, Callable, TypeVar, cast

from task_ledger_mcp.database.exceptions import DocumentStoreError, StoreUnavailableError
from task_ledger_mcp.database.query import QueryError
from task_ledger_mcp.domain.entities.result_types import DomainError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def domain_operation(operation: str) -> Callable[[F], F]:
    """
    Decorate a service method so store failures become domain errors.

    ``StoreUnavailableError`` is passed through with the store's own message
    and never retried. Malformed queries and malformed document ids (an empty
    id, or one containing a path separator) become validation errors. Any
    other store error, such as a misused write batch, is a failed operation.
    """

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except StoreUnavailableError as e:
                logger.warning("%s failed: store unavailable (%s)", operation, e.reason)
                return DomainError.store_unavailable(operation, e.reason)
            except QueryError as e:
                return DomainError.validation_error(str(e), details={"operation": operation})
            except DocumentStoreError as e:
                logger.error("%s failed: %s", operation, e, exc_info=True)
                return DomainError.operation_failed(operation, str(e))
            except ValueError as e:
                return DomainError.validation_error(str(e), details={"operation": operation})

        return cast(F, wrapper)

    return decorator
