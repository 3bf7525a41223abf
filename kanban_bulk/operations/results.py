"""Aggregation of per-ticket outcomes into a batch result."""

from typing import Iterable, List, Sequence

from ..models import AggregateResult, EntityError, ErrorKind, ExecutionOutcome, Ticket


def aggregate_results(
    operation_id: str,
    total_count: int,
    success_ids: Sequence[str],
    errors: Sequence[EntityError],
) -> AggregateResult:
    """Build the summary record for a batch."""
    return AggregateResult(
        operation_id=operation_id,
        success_count=len(success_ids),
        error_count=len(errors),
        total_count=total_count,
        errors=list(errors),
        success_entity_ids=list(success_ids),
    )


def aggregate_outcomes(operation_id: str, outcomes: Iterable[ExecutionOutcome]) -> AggregateResult:
    """Aggregate settled per-ticket outcomes, preserving their order."""
    outcomes = list(outcomes)
    success_ids: List[str] = []
    errors: List[EntityError] = []

    for outcome in outcomes:
        if outcome.succeeded:
            success_ids.append(outcome.entity_id)
        else:
            errors.append(EntityError(
                entity_id=outcome.entity_id,
                entity_key=outcome.entity_key,
                error=outcome.error,
                kind=ErrorKind.ENTITY,
            ))

    return aggregate_results(operation_id, len(outcomes), success_ids, errors)


def all_errored(
    operation_id: str,
    tickets: Sequence[Ticket],
    message: str,
    kind: ErrorKind,
) -> AggregateResult:
    """Mark every ticket of a batch as failed with the same message."""
    errors = [
        EntityError(entity_id=t.id, entity_key=t.key, error=message, kind=kind)
        for t in tickets
    ]
    return aggregate_results(operation_id, len(tickets), [], errors)
