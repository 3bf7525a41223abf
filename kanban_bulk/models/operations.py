"""
Bulk operation definitions and their parameter models.

Parameters form a tagged union keyed by ``type``. Every field is optional
at construction so that missing values are reported by the validator as
readable messages instead of failing model construction.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Callable, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field

from .ticket import Ticket


class OperationType(str, Enum):
    """Kinds of bulk operation the engine can dispatch."""
    MOVE = "move"
    ASSIGN = "assign"
    PRIORITY = "priority"
    LABELS = "labels"
    DELETE = "delete"
    EXPORT = "export"


class LabelsAction(str, Enum):
    """How a labels operation combines with existing labels."""
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"


class ExportFormat(str, Enum):
    """Supported export formats."""
    CSV = "csv"
    JSON = "json"
    EXCEL = "excel"


@dataclass(frozen=True)
class OperationDefinition:
    """A bulk operation offered to the user. Immutable once built."""
    id: str
    type: OperationType
    label: str
    description: str = ""
    icon: str = ""
    is_destructive: bool = False
    requires_confirmation: bool = False
    confirmation_message: Optional[str] = None
    is_disabled: Optional[Callable[[Sequence[Ticket]], bool]] = None


# ============================================
# PARAMETERS
# ============================================

class MoveParams(BaseModel):
    """Move tickets to another status."""
    type: Literal["move"] = "move"
    target_status: Optional[str] = None
    target_column: Optional[str] = None


class AssignParams(BaseModel):
    """Assign tickets to a user."""
    type: Literal["assign"] = "assign"
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None


class PriorityParams(BaseModel):
    """Set ticket priority."""
    type: Literal["priority"] = "priority"
    priority: Optional[str] = None


class LabelsParams(BaseModel):
    """Add, remove or replace labels."""
    type: Literal["labels"] = "labels"
    action: Optional[str] = None
    labels: List[str] = Field(default_factory=list)


class ExportParams(BaseModel):
    """Export tickets to a text payload."""
    type: Literal["export"] = "export"
    format: Optional[str] = None
    include_fields: List[str] = Field(default_factory=list)


class DeleteParams(BaseModel):
    """Delete takes no parameters."""
    type: Literal["delete"] = "delete"


OperationParams = Annotated[
    Union[MoveParams, AssignParams, PriorityParams, LabelsParams, ExportParams, DeleteParams],
    Field(discriminator="type"),
]

PARAMS_BY_TYPE = {
    OperationType.MOVE: MoveParams,
    OperationType.ASSIGN: AssignParams,
    OperationType.PRIORITY: PriorityParams,
    OperationType.LABELS: LabelsParams,
    OperationType.EXPORT: ExportParams,
    OperationType.DELETE: DeleteParams,
}
