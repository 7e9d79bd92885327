"""Repository-related exceptions for neo-tenancy."""

from typing import Any, Optional

from .base import NeoTenancyError


class RepositoryError(NeoTenancyError):
    """Base class for repository errors.
    
    Carries the operation name, entity type and, when known, the entity id.
    Entity payloads are never included.
    """
    
    def __init__(
        self,
        message: str,
        operation: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        error_code: str = "REPOSITORY_ERROR",
    ):
        self.operation = operation
        self.entity_type = entity_type
        self.entity_id = entity_id
        details = {"operation": operation, "entity_type": entity_type}
        if entity_id is not None:
            details["entity_id"] = entity_id
        super().__init__(message, error_code=error_code, details=details)


class RepositoryOperationFailedError(RepositoryError):
    """Raised when the underlying storage fails (connection, malformed query).
    
    The original exception is chained as ``__cause__``; it is never retried here.
    """
    
    def __init__(
        self,
        operation: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        message = f"Repository operation '{operation}' failed for entity '{entity_type}'"
        if entity_id:
            message += f" with ID '{entity_id}'"
        super().__init__(
            message,
            operation=operation,
            entity_type=entity_type,
            entity_id=entity_id,
            error_code="REPOSITORY_OPERATION_FAILED",
        )
        self.original_error = cause
        if cause is not None:
            self.details["cause"] = cause.__class__.__name__
            self.__cause__ = cause


class ConcurrencyConflictError(RepositoryError):
    """Raised when an optimistic version check fails on save."""
    
    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        expected_version: Any,
        actual_version: Any,
    ):
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Version conflict for '{entity_type}' with ID '{entity_id}': "
            f"expected {expected_version}, found {actual_version}",
            operation="save",
            entity_type=entity_type,
            entity_id=entity_id,
            error_code="CONCURRENCY_CONFLICT",
        )
        self.details["expected_version"] = expected_version
        self.details["actual_version"] = actual_version
