"""
Operations module for bulk ticket operations.

Catalog, validation, confirmation messages, the fail-isolated batch
engine, result aggregation and export.
"""

from .catalog import OperationCatalog, default_operations, default_catalog
from .confirmation import get_confirmation_message, get_operation_summary, requires_confirmation
from .engine import BulkExecutionEngine, ExecutionState
from .exceptions import (
    BulkOperationError,
    OperationValidationError,
    EntityOperationError,
    EngineError,
    UnknownOperationError,
)
from .exporter import export_tickets, EXPORT_FIELDS, DEFAULT_EXPORT_FIELDS
from .mutations import MutationPrimitives, InMemoryTicketStore, fail_for
from .results import aggregate_results, aggregate_outcomes, all_errored
from .validator import validate_operation, coerce_params

__all__ = [
    "OperationCatalog",
    "default_operations",
    "default_catalog",
    "get_confirmation_message",
    "get_operation_summary",
    "requires_confirmation",
    "BulkExecutionEngine",
    "ExecutionState",
    "BulkOperationError",
    "OperationValidationError",
    "EntityOperationError",
    "EngineError",
    "UnknownOperationError",
    "export_tickets",
    "EXPORT_FIELDS",
    "DEFAULT_EXPORT_FIELDS",
    "MutationPrimitives",
    "InMemoryTicketStore",
    "fail_for",
    "aggregate_results",
    "aggregate_outcomes",
    "all_errored",
    "validate_operation",
    "coerce_params",
]
