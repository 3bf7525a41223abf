"""
Batch execution engine for bulk ticket operations.

One ``execute`` call is one batch:

    IDLE -> VALIDATING -> INVALID -> DONE           (every ticket errored)
                       -> EXECUTING -> AGGREGATING -> DONE

Each ticket's mutation runs independently and is settled on its own, so
a failing ticket never stops its siblings. Every failure mode ends up as
data inside the returned AggregateResult; ``execute`` does not raise for
validation, per-ticket or handler errors.
"""

import asyncio
import contextlib
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence, Tuple

from config.settings import get_settings
from ..models import (
    AggregateResult,
    ErrorKind,
    ExecutionOutcome,
    ExportPayload,
    OperationDefinition,
    OperationParams,
    OperationType,
    Ticket,
)
from ..selection import SelectionStore
from ..utils.callbacks import call_collaborator
from .confirmation import get_operation_summary
from .exceptions import EngineError, OperationValidationError
from .exporter import export_tickets
from .mutations import MutationPrimitives
from .results import aggregate_outcomes, aggregate_results, all_errored
from .validator import coerce_params, validate_operation

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "Another bulk operation is already running"

ResultCallback = Callable[[AggregateResult], Any]
ExportCallback = Callable[[ExportPayload], Any]


class ExecutionState(str, Enum):
    """Lifecycle of a single batch."""
    IDLE = "idle"
    VALIDATING = "validating"
    INVALID = "invalid"
    EXECUTING = "executing"
    AGGREGATING = "aggregating"
    DONE = "done"


_RUNNING_STATES = {ExecutionState.VALIDATING, ExecutionState.EXECUTING, ExecutionState.AGGREGATING}


class BulkExecutionEngine:
    """Runs bulk operations against a snapshot of the selection."""

    def __init__(
        self,
        store: Optional[SelectionStore],
        mutations: MutationPrimitives,
        on_operation_complete: Optional[ResultCallback] = None,
        on_export: Optional[ExportCallback] = None,
        max_concurrency: Optional[int] = None,
    ):
        self.store = store
        self.mutations = mutations
        self.on_operation_complete = on_operation_complete
        self.on_export = on_export
        # None falls back to settings; 0 means unlimited
        if max_concurrency is None:
            max_concurrency = get_settings().bulk_max_concurrency
        self.max_concurrency = max_concurrency

        self.state = ExecutionState.IDLE
        self.last_result: Optional[AggregateResult] = None

    @property
    def is_executing(self) -> bool:
        return self.state in _RUNNING_STATES

    async def execute(
        self,
        operation: OperationDefinition,
        params: Any = None,
        tickets: Optional[Sequence[Ticket]] = None,
    ) -> AggregateResult:
        """
        Run one batch.

        Args:
            operation: Operation to run
            params: Params model or plain dict for the operation type
            tickets: Tickets to act on; defaults to the store's selection

        Returns:
            AggregateResult with itemized successes and failures
        """
        if tickets is None:
            tickets = self.store.selected_tickets if self.store is not None else []

        # Overlapping batches are refused rather than queued
        if self.is_executing:
            logger.warning(f"Rejected bulk operation {operation.id}: {BUSY_MESSAGE.lower()}")
            return all_errored(operation.id, list(tickets), BUSY_MESSAGE, ErrorKind.BUSY)

        self.state = ExecutionState.VALIDATING
        snapshot: Tuple[Ticket, ...] = tuple(tickets)
        started = time.perf_counter()

        try:
            result = await self._run(operation, params, snapshot)
            self.last_result = result
        finally:
            self.state = ExecutionState.DONE

        duration = time.perf_counter() - started
        logger.info(
            f"Bulk operation {operation.id} finished: {result.success_count} succeeded, "
            f"{result.error_count} failed of {result.total_count} ({duration:.2f}s)"
        )

        if self.on_operation_complete:
            await call_collaborator(self.on_operation_complete, result, "Operation complete")

        return result

    async def _run(
        self,
        operation: OperationDefinition,
        params: Any,
        snapshot: Tuple[Ticket, ...],
    ) -> AggregateResult:
        try:
            typed_params = coerce_params(operation.type, params)
            errors = validate_operation(operation, snapshot, typed_params)
        except OperationValidationError as e:
            typed_params, errors = None, e.errors

        if errors:
            self.state = ExecutionState.INVALID
            message = ", ".join(errors)
            logger.warning(f"Bulk operation {operation.id} rejected: {message}")
            return all_errored(operation.id, snapshot, message, ErrorKind.VALIDATION)

        self.state = ExecutionState.EXECUTING
        logger.info(get_operation_summary(operation, snapshot, typed_params))

        try:
            result = await self._dispatch(operation, typed_params, snapshot)
        except Exception as e:
            logger.error(f"Bulk operation {operation.id} catastrophic failure: {e}", exc_info=True)
            self.state = ExecutionState.AGGREGATING
            return all_errored(operation.id, snapshot, str(e) or type(e).__name__, ErrorKind.ENGINE)

        self.state = ExecutionState.AGGREGATING

        # Keep the selection after exports and after any failure so the
        # user can inspect or retry
        if operation.type != OperationType.EXPORT and result.error_count == 0:
            await self._clear_selection(snapshot)

        return result

    async def _dispatch(
        self,
        operation: OperationDefinition,
        params: OperationParams,
        snapshot: Tuple[Ticket, ...],
    ) -> AggregateResult:
        op_type = OperationType(operation.type)

        if op_type == OperationType.EXPORT:
            return await self._export(operation, params, snapshot)

        call = self._entity_call(op_type, params)
        limiter = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        outcomes = await asyncio.gather(
            *(self._attempt(call, ticket, limiter) for ticket in snapshot)
        )
        return aggregate_outcomes(operation.id, outcomes)

    def _entity_call(
        self,
        op_type: OperationType,
        params: OperationParams,
    ) -> Callable[[Ticket], Awaitable[None]]:
        """Bind the per-ticket primitive for an operation type."""
        m = self.mutations

        if op_type == OperationType.MOVE:
            primitive, args = m.move_ticket, (params.target_status,)
        elif op_type == OperationType.ASSIGN:
            primitive, args = m.assign_ticket, (params.assignee_id, params.assignee_name)
        elif op_type == OperationType.PRIORITY:
            primitive, args = m.set_priority, (params.priority,)
        elif op_type == OperationType.LABELS:
            primitive, args = m.set_labels, (params.action, list(params.labels))
        elif op_type == OperationType.DELETE:
            primitive, args = m.delete_ticket, ()
        else:
            raise EngineError(f"Unsupported operation type: {op_type.value}")

        if primitive is None:
            raise EngineError(f"No mutation primitive configured for '{op_type.value}'")

        return lambda ticket: primitive(ticket, *args)

    async def _attempt(
        self,
        call: Callable[[Ticket], Awaitable[None]],
        ticket: Ticket,
        limiter: Optional[asyncio.Semaphore],
    ) -> ExecutionOutcome:
        """Run one ticket's mutation and settle it into an outcome."""
        async with (limiter if limiter is not None else contextlib.nullcontext()):
            try:
                await call(ticket)
            except Exception as e:
                logger.error(f"Bulk operation failed for {ticket.key}: {e}")
                return ExecutionOutcome(ticket.id, ticket.key, str(e) or type(e).__name__)
        return ExecutionOutcome(ticket.id, ticket.key)

    async def _export(
        self,
        operation: OperationDefinition,
        params: OperationParams,
        snapshot: Tuple[Ticket, ...],
    ) -> AggregateResult:
        payload = export_tickets(snapshot, params)
        result = aggregate_results(operation.id, len(snapshot), [t.id for t in snapshot], [])

        if self.on_export:
            await call_collaborator(self.on_export, payload, "Export delivery")

        return result.model_copy(update={"export_payload": payload})

    async def _clear_selection(self, snapshot: Tuple[Ticket, ...]):
        if self.store is None:
            return
        try:
            await self.store.clear_if_unchanged(t.id for t in snapshot)
        except Exception as e:
            logger.error(f"Failed to clear selection after bulk operation: {e}")
