from .ticket import Ticket, TicketStatus, TicketPriority
from .operations import (
    OperationType,
    OperationDefinition,
    OperationParams,
    LabelsAction,
    ExportFormat,
    MoveParams,
    AssignParams,
    PriorityParams,
    LabelsParams,
    ExportParams,
    DeleteParams,
    PARAMS_BY_TYPE,
)
from .results import (
    ErrorKind,
    SelectionState,
    ExecutionOutcome,
    EntityError,
    ExportPayload,
    AggregateResult,
)

__all__ = [
    "Ticket",
    "TicketStatus",
    "TicketPriority",
    "OperationType",
    "OperationDefinition",
    "OperationParams",
    "LabelsAction",
    "ExportFormat",
    "MoveParams",
    "AssignParams",
    "PriorityParams",
    "LabelsParams",
    "ExportParams",
    "DeleteParams",
    "PARAMS_BY_TYPE",
    "ErrorKind",
    "SelectionState",
    "ExecutionOutcome",
    "EntityError",
    "ExportPayload",
    "AggregateResult",
]
