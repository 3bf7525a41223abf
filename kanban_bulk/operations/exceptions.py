"""Custom exceptions for bulk operations."""

from typing import List, Optional


class BulkOperationError(Exception):
    """Base exception for bulk operation errors."""
    pass


class OperationValidationError(BulkOperationError):
    """Operation parameters were rejected before any ticket was touched."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


class EntityOperationError(BulkOperationError):
    """A single ticket's mutation failed."""

    def __init__(self, message: str, entity_id: Optional[str] = None):
        self.entity_id = entity_id
        super().__init__(message)


class EngineError(BulkOperationError):
    """Unexpected failure inside an operation handler."""
    pass


class UnknownOperationError(BulkOperationError):
    """Requested operation is not in the catalog."""
    pass
