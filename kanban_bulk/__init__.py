"""
Bulk selection and batch-operation engine for the kanban board.

Selection state, the operation catalog, parameter validation and the
fail-isolated batch executor live here; rendering and the tracker REST
client are collaborators injected from outside.

Embedding processes call ``configure_logging()`` once at startup, before
``create_bulk_operations()``, to get the standard log format on stdout.
"""

from .utils.logging import configure_logging

__version__ = "0.1.0"

__all__ = ["configure_logging"]
