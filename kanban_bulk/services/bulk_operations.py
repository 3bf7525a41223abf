"""
Bulk operations service.

Bundles the selection store, the operation catalog and the batch engine
behind one object, the way the board's bulk toolbar consumes them.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, Union

from config.settings import get_settings
from ..models import AggregateResult, OperationDefinition, SelectionState, Ticket
from ..operations import (
    BulkExecutionEngine,
    MutationPrimitives,
    OperationCatalog,
    coerce_params,
    default_catalog,
    get_confirmation_message,
)
from ..operations.exceptions import OperationValidationError
from ..selection import InMemorySelectionStorage, RedisSelectionStorage, SelectionStorage, SelectionStore

logger = logging.getLogger(__name__)


class BulkOperationsService:
    """Selection plus bulk operations for one board view."""

    def __init__(
        self,
        store: SelectionStore,
        catalog: OperationCatalog,
        engine: BulkExecutionEngine,
    ):
        self.store = store
        self.catalog = catalog
        self.engine = engine

    # Selection
    @property
    def selection_state(self) -> SelectionState:
        return self.store.state

    @property
    def selected_tickets(self) -> List[Ticket]:
        return self.store.selected_tickets

    # Operations
    @property
    def available_operations(self) -> List[OperationDefinition]:
        return self.catalog.available_operations(self.store.selected_tickets)

    @property
    def is_executing(self) -> bool:
        return self.engine.is_executing

    @property
    def last_result(self) -> Optional[AggregateResult]:
        return self.engine.last_result

    def resolve(self, operation: Union[str, OperationDefinition]) -> OperationDefinition:
        if isinstance(operation, OperationDefinition):
            return operation
        return self.catalog.get(operation)

    def can_execute(self, operation: Union[str, OperationDefinition]) -> bool:
        return self.catalog.can_execute(self.resolve(operation), self.store.selected_tickets)

    def get_confirmation_message(self, operation: Union[str, OperationDefinition], params: Any = None) -> str:
        op = self.resolve(operation)
        try:
            typed_params = coerce_params(op.type, params)
        except OperationValidationError:
            typed_params = None
        return get_confirmation_message(op, self.store.selected_tickets, typed_params)

    async def execute(self, operation: Union[str, OperationDefinition], params: Any = None) -> AggregateResult:
        """
        Run an operation on the current selection.

        Confirmation must already have been obtained by the caller for
        operations with ``requires_confirmation``.
        """
        return await self.engine.execute(self.resolve(operation), params)


def create_selection_storage(use_redis: bool = False) -> SelectionStorage:
    """Pick the selection storage backend."""
    settings = get_settings()
    if use_redis and settings.redis_url:
        return RedisSelectionStorage()
    if use_redis:
        logger.warning("Redis requested for selection storage but REDIS_URL is empty, using memory")
    return InMemorySelectionStorage()


async def create_bulk_operations(
    tickets: Sequence[Ticket],
    mutations: MutationPrimitives,
    catalog: Optional[OperationCatalog] = None,
    storage: Optional[SelectionStorage] = None,
    max_selection_count: Optional[int] = None,
    on_operation_complete: Optional[Callable[[AggregateResult], Any]] = None,
    on_selection_change: Optional[Callable[[SelectionState], Any]] = None,
    on_export: Optional[Callable] = None,
) -> BulkOperationsService:
    """
    Wire store, catalog and engine from settings and rehydrate the
    persisted selection.
    """
    settings = get_settings()

    store = SelectionStore(
        tickets,
        storage=storage if storage is not None else create_selection_storage(),
        max_selection_count=max_selection_count or settings.max_selection_count,
        on_selection_change=on_selection_change,
    )
    await store.load()

    engine = BulkExecutionEngine(
        store,
        mutations,
        on_operation_complete=on_operation_complete,
        on_export=on_export,
    )

    return BulkOperationsService(store, catalog or default_catalog(), engine)
