"""
Registry of bulk operations and their enablement rules.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from config.settings import get_settings
from ..models import OperationDefinition, OperationType, Ticket, TicketStatus
from .exceptions import UnknownOperationError

logger = logging.getLogger(__name__)

_KNOWN_TYPES = {t.value for t in OperationType}


def default_operations() -> List[OperationDefinition]:
    """The operations offered by the board out of the box."""
    return [
        OperationDefinition(
            id="move",
            type=OperationType.MOVE,
            label="Move Tickets",
            description="Move selected tickets to a different status",
            icon="↔️",
            requires_confirmation=True,
            confirmation_message="Are you sure you want to move the selected tickets?",
        ),
        OperationDefinition(
            id="assign",
            type=OperationType.ASSIGN,
            label="Assign Tickets",
            description="Assign selected tickets to a user",
            icon="👤",
        ),
        OperationDefinition(
            id="priority",
            type=OperationType.PRIORITY,
            label="Change Priority",
            description="Change priority of selected tickets",
            icon="⚡",
        ),
        OperationDefinition(
            id="labels",
            type=OperationType.LABELS,
            label="Manage Labels",
            description="Add, remove, or replace labels on selected tickets",
            icon="🏷️",
        ),
        OperationDefinition(
            id="delete",
            type=OperationType.DELETE,
            label="Delete Tickets",
            description="Permanently delete selected tickets",
            icon="🗑️",
            is_destructive=True,
            requires_confirmation=True,
            confirmation_message=(
                "Are you sure you want to delete the selected tickets? "
                "This action cannot be undone."
            ),
            is_disabled=lambda tickets: len(tickets) == 0,
        ),
        OperationDefinition(
            id="export",
            type=OperationType.EXPORT,
            label="Export Tickets",
            description="Export selected tickets to CSV, JSON, or Excel",
            icon="📤",
        ),
    ]


class OperationCatalog:
    """Immutable set of operation definitions. Holds no per-call state."""

    def __init__(
        self,
        operations: Iterable[OperationDefinition],
        in_progress_statuses: Optional[Iterable[str]] = None,
    ):
        ops: Tuple[OperationDefinition, ...] = tuple(operations)
        seen = set()
        for op in ops:
            if op.id in seen:
                raise ValueError(f"Duplicate operation id: {op.id}")
            if op.type not in _KNOWN_TYPES:
                raise ValueError(f"Unknown operation type for {op.id}: {op.type}")
            seen.add(op.id)
        self._operations = ops

        if in_progress_statuses is None:
            in_progress_statuses = [TicketStatus.IN_PROGRESS.value]
        self._in_progress_statuses = frozenset(
            str(getattr(s, "value", s)) for s in in_progress_statuses
        )

    def __iter__(self) -> Iterator[OperationDefinition]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    @property
    def in_progress_statuses(self) -> frozenset:
        return self._in_progress_statuses

    def ids(self) -> List[str]:
        return [op.id for op in self._operations]

    def get(self, operation_id: str) -> OperationDefinition:
        for op in self._operations:
            if op.id == operation_id:
                return op
        raise UnknownOperationError(f"Unknown bulk operation: {operation_id}")

    def can_execute(self, operation: OperationDefinition, tickets: Sequence[Ticket]) -> bool:
        """Check whether an operation may run against the given selection."""
        if not tickets:
            return False

        if operation.is_disabled and operation.is_disabled(tickets):
            return False

        if operation.type == OperationType.DELETE:
            # Never delete tickets someone is actively working on
            return not any(t.is_in_status(self._in_progress_statuses) for t in tickets)

        return True

    def available_operations(self, tickets: Sequence[Ticket]) -> List[OperationDefinition]:
        return [op for op in self._operations if self.can_execute(op, tickets)]


def default_catalog() -> OperationCatalog:
    """Build the default catalog using configured in-progress statuses."""
    settings = get_settings()
    return OperationCatalog(default_operations(), in_progress_statuses=settings.in_progress_statuses)
