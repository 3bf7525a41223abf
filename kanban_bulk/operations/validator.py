"""
Bulk operation parameter validation.

Validates parameters against the operation type and the selection before
any ticket is touched. Everything here is pure: no I/O, no state.
"""

from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..models import (
    PARAMS_BY_TYPE,
    ExportFormat,
    LabelsAction,
    OperationDefinition,
    OperationParams,
    OperationType,
    Ticket,
    TicketPriority,
    TicketStatus,
)
from .exceptions import OperationValidationError

_params_adapter = TypeAdapter(OperationParams)

VALID_STATUSES = {s.value for s in TicketStatus}
VALID_PRIORITIES = {p.value for p in TicketPriority}
VALID_LABEL_ACTIONS = {a.value for a in LabelsAction}
VALID_EXPORT_FORMATS = {f.value for f in ExportFormat}


def coerce_params(operation_type: OperationType, params: Any) -> OperationParams:
    """
    Turn caller-supplied parameters into the typed params model.

    Accepts a params model, a plain dict (``type`` defaults to the
    operation type) or None.

    Raises:
        OperationValidationError: if the data cannot form a params model
    """
    if isinstance(params, BaseModel):
        return params

    try:
        data = {"type": OperationType(operation_type).value}
    except ValueError:
        raise OperationValidationError([f"Unknown operation type: {operation_type}"])

    if params is not None:
        if not isinstance(params, dict):
            raise OperationValidationError([f"Parameters must be a mapping, got {type(params).__name__}"])
        data.update(params)

    try:
        return _params_adapter.validate_python(data)
    except ValidationError as e:
        messages = []
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"])
            messages.append(f"{location}: {err['msg']}" if location else err["msg"])
        raise OperationValidationError(messages)


def validate_operation(
    operation: OperationDefinition,
    tickets: Sequence[Ticket],
    params: Optional[OperationParams],
) -> List[str]:
    """
    Validate a bulk operation request.

    Args:
        operation: Operation about to run
        tickets: Selected tickets
        params: Typed parameters for the operation (None for delete)

    Returns:
        List of error messages, empty when the request is valid
    """
    errors: List[str] = []

    if not tickets:
        errors.append("No tickets selected")
        return errors

    try:
        op_type = OperationType(operation.type)
    except ValueError:
        errors.append(f"Unknown operation type: {operation.type}")
        return errors

    if op_type == OperationType.DELETE:
        return errors

    if params is None:
        params = PARAMS_BY_TYPE[op_type]()

    params_type = getattr(params, "type", None)
    if params_type != op_type.value:
        errors.append(f"Parameters for '{params_type}' do not match operation type '{op_type.value}'")
        return errors

    if op_type == OperationType.MOVE:
        if not params.target_status:
            errors.append("Target status is required")
        elif params.target_status not in VALID_STATUSES:
            errors.append(f"Unknown target status: {params.target_status}")

    elif op_type == OperationType.ASSIGN:
        if not params.assignee_id:
            errors.append("Assignee is required")

    elif op_type == OperationType.PRIORITY:
        if not params.priority:
            errors.append("Priority is required")
        elif params.priority not in VALID_PRIORITIES:
            errors.append(f"Unknown priority: {params.priority}")

    elif op_type == OperationType.LABELS:
        if params.action not in VALID_LABEL_ACTIONS:
            errors.append("Labels action must be one of: add, remove, replace")
        if not params.labels:
            errors.append("At least one label is required")

    elif op_type == OperationType.EXPORT:
        if params.format not in VALID_EXPORT_FORMATS:
            errors.append("Export format must be one of: csv, json, excel")
        if not params.include_fields:
            errors.append("At least one export field is required")

    return errors
