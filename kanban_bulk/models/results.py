"""Selection state and batch result models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field, model_validator


class ErrorKind(str, Enum):
    """Where in the batch lifecycle an error was recorded."""
    VALIDATION = "validation"  # parameters rejected, nothing attempted
    ENTITY = "entity"          # one ticket's mutation failed
    ENGINE = "engine"          # unexpected failure inside a handler
    BUSY = "busy"              # another batch was still running


@dataclass(frozen=True)
class SelectionState:
    """Derived counts for the current selection."""
    selected_ids: FrozenSet[str] = field(default_factory=frozenset)
    selected_count: int = 0
    total_count: int = 0
    is_all_selected: bool = False
    is_partially_selected: bool = False

    @classmethod
    def compute(cls, selected_ids: FrozenSet[str], total_count: int) -> "SelectionState":
        selected_count = len(selected_ids)
        return cls(
            selected_ids=selected_ids,
            selected_count=selected_count,
            total_count=total_count,
            is_all_selected=selected_count == total_count and total_count > 0,
            is_partially_selected=0 < selected_count < total_count,
        )


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of a single ticket's mutation attempt."""
    entity_id: str
    entity_key: str
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class EntityError(BaseModel):
    """An itemized failure inside an aggregate result."""
    entity_id: str
    entity_key: str
    error: str
    kind: ErrorKind = ErrorKind.ENTITY


class ExportPayload(BaseModel):
    """Serialized export ready to hand to a download collaborator."""
    content: str
    filename: str
    mime_type: str
    format: str


class AggregateResult(BaseModel):
    """Summary of one batch."""
    operation_id: str
    success_count: int = Field(ge=0)
    error_count: int = Field(ge=0)
    total_count: int = Field(ge=0)
    errors: List[EntityError] = Field(default_factory=list)
    success_entity_ids: List[str] = Field(default_factory=list)
    export_payload: Optional[ExportPayload] = None

    @model_validator(mode="after")
    def check_counts(self) -> "AggregateResult":
        if self.success_count + self.error_count != self.total_count:
            raise ValueError(
                f"success_count ({self.success_count}) + error_count ({self.error_count}) "
                f"must equal total_count ({self.total_count})"
            )
        return self

    @property
    def is_success(self) -> bool:
        return self.error_count == 0

    @property
    def failed_entity_ids(self) -> List[str]:
        """Ids worth retrying; the engine itself never retries."""
        return [e.entity_id for e in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump(mode="json")
