"""
Unit tests for the bulk execution engine.

Partial failure isolation, validation short-circuit, post-batch selection
clearing, the busy guard and handler failures converted into results.
"""

import asyncio

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

from kanban_bulk.models import (
    ErrorKind,
    ExportParams,
    MoveParams,
    OperationDefinition,
    TicketPriority,
    TicketStatus,
)
from kanban_bulk.operations import (
    BulkExecutionEngine,
    ExecutionState,
    InMemoryTicketStore,
    MutationPrimitives,
    fail_for,
)
from kanban_bulk.operations.engine import BUSY_MESSAGE
from kanban_bulk.selection import SelectionStore


@pytest_asyncio.fixture
async def selected_store(sample_tickets):
    """Store with T1, T2, T3 selected."""
    store = SelectionStore(sample_tickets)
    await store.select_range(0, 2)
    return store


@pytest.mark.asyncio
class TestScenarios:
    """End-to-end batch scenarios."""

    async def test_partial_failure_keeps_selection(self, selected_store, sample_tickets, catalog):
        """Move with T2 failing: 2 succeed, 1 errors, selection untouched."""
        tracker = InMemoryTicketStore(sample_tickets, outcome=fail_for({"T2"}, "Failed to move ticket"))
        engine = BulkExecutionEngine(selected_store, tracker.primitives())

        result = await engine.execute(catalog.get("move"), {"target_status": "DONE"})

        assert result.success_count == 2
        assert result.error_count == 1
        assert result.total_count == 3
        assert result.success_entity_ids == ["T1", "T3"]
        assert [e.entity_id for e in result.errors] == ["T2"]
        assert result.errors[0].entity_key == "BOARD-2"
        assert result.errors[0].kind == ErrorKind.ENTITY
        assert selected_store.selected_ids == {"T1", "T2", "T3"}

        assert tracker.get("T1").status == TicketStatus.DONE
        assert tracker.get("T3").status == TicketStatus.DONE
        assert tracker.get("T2").status == TicketStatus.IN_REVIEW

    async def test_full_success_clears_selection(self, selected_store, ticket_store, catalog):
        """Priority change on all three succeeds and clears the selection."""
        engine = BulkExecutionEngine(selected_store, ticket_store.primitives())

        result = await engine.execute(catalog.get("priority"), {"priority": "HIGH"})

        assert result.success_count == 3
        assert result.error_count == 0
        assert selected_store.selected_ids == frozenset()
        assert all(ticket_store.get(tid).priority == TicketPriority.HIGH for tid in ("T1", "T2", "T3"))

    async def test_export_never_clears_selection(self, selected_store, ticket_store, catalog):
        delivered = []
        engine = BulkExecutionEngine(selected_store, ticket_store.primitives(), on_export=delivered.append)

        result = await engine.execute(
            catalog.get("export"), ExportParams(format="csv", include_fields=["key", "title"])
        )

        assert result.success_count == 3
        assert result.export_payload is not None
        lines = result.export_payload.content.split("\n")
        assert len(lines) == 4
        assert lines[0] == "Key,Title"
        assert delivered == [result.export_payload]
        assert selected_store.selected_ids == {"T1", "T2", "T3"}
        assert ticket_store.calls == []

    async def test_invalid_params_touch_nothing(self, selected_store, ticket_store, catalog):
        """Move without target_status: all errored, zero primitive calls."""
        engine = BulkExecutionEngine(selected_store, ticket_store.primitives())

        result = await engine.execute(catalog.get("move"), {})

        assert result.error_count == result.total_count == 3
        assert result.success_count == 0
        assert {e.kind for e in result.errors} == {ErrorKind.VALIDATION}
        assert result.errors[0].error == "Target status is required"
        assert ticket_store.calls == []
        assert selected_store.selected_ids == {"T1", "T2", "T3"}


@pytest.mark.asyncio
class TestFailureIsolation:

    async def test_every_ticket_attempted_despite_failures(self, sample_tickets, catalog):
        move = AsyncMock(side_effect=[RuntimeError("timeout"), None, ValueError("conflict"), None, None])
        engine = BulkExecutionEngine(None, MutationPrimitives(move_ticket=move))

        result = await engine.execute(catalog.get("move"), MoveParams(target_status="DONE"), tickets=sample_tickets)

        assert move.await_count == 5
        assert result.success_count == 3
        assert result.error_count == 2
        assert sorted(e.error for e in result.errors) == ["conflict", "timeout"]

    async def test_counts_always_add_up(self, sample_tickets, catalog):
        for failing in [set(), {"T1"}, {"T1", "T3", "T5"}, {t.id for t in sample_tickets}]:
            tracker = InMemoryTicketStore(sample_tickets, outcome=fail_for(failing))
            engine = BulkExecutionEngine(None, tracker.primitives())

            result = await engine.execute(catalog.get("assign"), {"assignee_id": "u-1"}, tickets=sample_tickets)

            assert result.success_count + result.error_count == len(sample_tickets)
            assert result.error_count == len(failing)

    async def test_primitive_arguments(self, three_tickets, catalog):
        labels = AsyncMock()
        assign = AsyncMock()
        engine = BulkExecutionEngine(None, MutationPrimitives(set_labels=labels, assign_ticket=assign))

        await engine.execute(catalog.get("labels"), {"action": "add", "labels": ["ux"]}, tickets=three_tickets[:1])
        await engine.execute(
            catalog.get("assign"), {"assignee_id": "u-1", "assignee_name": "Ana"}, tickets=three_tickets[:1]
        )

        labels.assert_awaited_once_with(three_tickets[0], "add", ["ux"])
        assign.assert_awaited_once_with(three_tickets[0], "u-1", "Ana")

    async def test_concurrency_is_capped(self, sample_tickets, catalog):
        running = 0
        peak = 0

        async def slow_delete(ticket):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

        engine = BulkExecutionEngine(None, MutationPrimitives(delete_ticket=slow_delete), max_concurrency=2)
        result = await engine.execute(catalog.get("delete"), tickets=sample_tickets[:3])

        assert result.success_count == 3
        assert peak == 2


@pytest.mark.asyncio
class TestEngineErrors:

    async def test_missing_primitive_becomes_engine_error(self, selected_store, catalog):
        engine = BulkExecutionEngine(selected_store, MutationPrimitives())

        result = await engine.execute(catalog.get("move"), {"target_status": "DONE"})

        assert result.error_count == result.total_count == 3
        assert {e.kind for e in result.errors} == {ErrorKind.ENGINE}
        assert "No mutation primitive" in result.errors[0].error
        assert selected_store.selected_ids == {"T1", "T2", "T3"}
        assert engine.is_executing is False

    async def test_unparseable_params_are_validation_errors(self, selected_store, ticket_store, catalog):
        engine = BulkExecutionEngine(selected_store, ticket_store.primitives())

        result = await engine.execute(catalog.get("labels"), {"action": "add", "labels": "ux"})

        assert {e.kind for e in result.errors} == {ErrorKind.VALIDATION}
        assert ticket_store.calls == []

    async def test_unknown_operation_type_is_a_validation_result(self, three_tickets, ticket_store):
        engine = BulkExecutionEngine(None, ticket_store.primitives())
        archive = OperationDefinition(id="archive", type="archive", label="Archive")

        result = await engine.execute(archive, {}, tickets=three_tickets)
        typed = await engine.execute(archive, MoveParams(target_status="DONE"), tickets=three_tickets)

        for res in (result, typed):
            assert res.error_count == res.total_count == 3
            assert {e.kind for e in res.errors} == {ErrorKind.VALIDATION}
            assert res.errors[0].error == "Unknown operation type: archive"
        assert ticket_store.calls == []
        assert engine.state == ExecutionState.DONE

    async def test_empty_selection(self, sample_tickets, ticket_store, catalog):
        engine = BulkExecutionEngine(SelectionStore(sample_tickets), ticket_store.primitives())

        result = await engine.execute(catalog.get("delete"))

        assert result.total_count == 0
        assert result.error_count == 0
        assert engine.state == ExecutionState.DONE

    async def test_failing_callbacks_are_swallowed(self, selected_store, ticket_store, catalog):
        on_complete = MagicMock(side_effect=RuntimeError("ui crashed"))
        on_export = AsyncMock(side_effect=OSError("disk full"))
        engine = BulkExecutionEngine(
            selected_store, ticket_store.primitives(), on_operation_complete=on_complete, on_export=on_export
        )

        result = await engine.execute(catalog.get("export"), {"format": "json", "include_fields": ["key"]})

        assert result.success_count == 3
        on_complete.assert_called_once_with(result)
        on_export.assert_awaited_once()


@pytest.mark.asyncio
class TestStateAndSelection:

    async def test_async_completion_callback_and_last_result(self, selected_store, ticket_store, catalog):
        on_complete = AsyncMock()
        engine = BulkExecutionEngine(selected_store, ticket_store.primitives(), on_operation_complete=on_complete)

        result = await engine.execute(catalog.get("delete"))

        on_complete.assert_awaited_once_with(result)
        assert engine.last_result is result
        assert engine.state == ExecutionState.DONE

    async def test_is_executing_during_batch(self, three_tickets, catalog):
        engine = None
        seen = []

        async def move(ticket, status):
            seen.append((engine.is_executing, engine.state))

        engine = BulkExecutionEngine(None, MutationPrimitives(move_ticket=move))
        await engine.execute(catalog.get("move"), {"target_status": "DONE"}, tickets=three_tickets)

        assert seen == [(True, ExecutionState.EXECUTING)] * 3
        assert engine.is_executing is False

    async def test_overlapping_call_is_rejected_as_busy(self, selected_store, catalog):
        release = asyncio.Event()
        move = AsyncMock()

        async def blocking_priority(ticket, priority):
            await release.wait()

        engine = BulkExecutionEngine(
            selected_store, MutationPrimitives(set_priority=blocking_priority, move_ticket=move)
        )

        first = asyncio.create_task(engine.execute(catalog.get("priority"), {"priority": "LOW"}))
        await asyncio.sleep(0)
        assert engine.is_executing is True

        busy = await engine.execute(catalog.get("move"), {"target_status": "DONE"})
        assert busy.error_count == busy.total_count == 3
        assert {e.kind for e in busy.errors} == {ErrorKind.BUSY}
        assert busy.errors[0].error == BUSY_MESSAGE
        move.assert_not_awaited()

        release.set()
        result = await first
        assert result.success_count == 3
        assert engine.last_result is result

    async def test_selection_changed_mid_batch_is_not_cleared(self, selected_store, catalog):
        release = asyncio.Event()

        async def blocking_delete(ticket):
            await release.wait()

        engine = BulkExecutionEngine(selected_store, MutationPrimitives(delete_ticket=blocking_delete))
        task = asyncio.create_task(engine.execute(catalog.get("delete")))
        await asyncio.sleep(0)

        await selected_store.toggle("T5")
        release.set()
        result = await task

        # the batch ran on the snapshot, the later change survives
        assert result.total_count == 3
        assert result.error_count == 0
        assert selected_store.selected_ids == {"T1", "T2", "T3", "T5"}
