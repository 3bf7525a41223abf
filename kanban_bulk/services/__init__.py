"""
Services module for board-facing bulk operations.
"""

from .bulk_operations import BulkOperationsService, create_bulk_operations, create_selection_storage

__all__ = [
    "BulkOperationsService",
    "create_bulk_operations",
    "create_selection_storage",
]
