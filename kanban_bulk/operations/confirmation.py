"""
Human-readable confirmation and progress messages for bulk operations.

The engine never asks for confirmation itself; callers must show the
message and only run the batch once the user agrees.
"""

from typing import Optional, Sequence

from ..models import OperationDefinition, OperationParams, OperationType, Ticket


def _ticket_text(count: int) -> str:
    return "ticket" if count == 1 else "tickets"


def _value(value) -> str:
    return str(getattr(value, "value", value))


def requires_confirmation(operation: OperationDefinition) -> bool:
    return bool(operation.requires_confirmation)


def get_confirmation_message(
    operation: OperationDefinition,
    tickets: Sequence[Ticket],
    params: Optional[OperationParams] = None,
) -> str:
    """
    Build the confirmation prompt for an operation.

    A static ``confirmation_message`` on the definition wins; otherwise
    the prompt is derived from the operation type, selection size and
    parameters.
    """
    if operation.confirmation_message:
        return operation.confirmation_message

    count = len(tickets)
    ticket_text = _ticket_text(count)
    op_type = OperationType(operation.type)

    if op_type == OperationType.MOVE:
        return f"Move {count} {ticket_text} to {_value(getattr(params, 'target_status', None))}?"

    if op_type == OperationType.ASSIGN:
        name = getattr(params, "assignee_name", None) or getattr(params, "assignee_id", None)
        return f"Assign {count} {ticket_text} to {name}?"

    if op_type == OperationType.PRIORITY:
        return f"Change priority of {count} {ticket_text} to {_value(getattr(params, 'priority', None))}?"

    if op_type == OperationType.LABELS:
        action = _value(getattr(params, "action", None)).capitalize()
        return f"{action} labels on {count} {ticket_text}?"

    if op_type == OperationType.DELETE:
        return f"Delete {count} {ticket_text}? This action cannot be undone."

    if op_type == OperationType.EXPORT:
        fmt = _value(getattr(params, "format", None) or "").upper()
        return f"Export {count} {ticket_text} as {fmt}?"

    return f"Execute {operation.label} on {count} {ticket_text}?"


def get_operation_summary(
    operation: OperationDefinition,
    tickets: Sequence[Ticket],
    params: Optional[OperationParams] = None,
) -> str:
    """Progress line describing a running batch, e.g. 'Moving 3 tickets to DONE'."""
    count = len(tickets)
    ticket_text = _ticket_text(count)
    op_type = OperationType(operation.type)

    if op_type == OperationType.MOVE:
        return f"Moving {count} {ticket_text} to {_value(getattr(params, 'target_status', None))}"
    if op_type == OperationType.ASSIGN:
        name = getattr(params, "assignee_name", None) or getattr(params, "assignee_id", None)
        return f"Assigning {count} {ticket_text} to {name}"
    if op_type == OperationType.PRIORITY:
        return f"Changing priority of {count} {ticket_text} to {_value(getattr(params, 'priority', None))}"
    if op_type == OperationType.LABELS:
        action = _value(getattr(params, "action", None)).capitalize()
        return f"{action} labels on {count} {ticket_text}"
    if op_type == OperationType.DELETE:
        return f"Deleting {count} {ticket_text}"
    if op_type == OperationType.EXPORT:
        fmt = _value(getattr(params, "format", None) or "").upper()
        return f"Exporting {count} {ticket_text} as {fmt}"
    return f"{operation.label} on {count} {ticket_text}"
