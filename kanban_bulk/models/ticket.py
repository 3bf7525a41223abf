"""Ticket data model for the board."""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field


class TicketStatus(str, Enum):
    """Board column states."""
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    DONE = "DONE"


class TicketPriority(str, Enum):
    """Ticket priority levels."""
    LOWEST = "LOWEST"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    HIGHEST = "HIGHEST"


class Ticket(BaseModel):
    """
    Projection of a tracker issue.

    Only id, key, title and status are needed to select and validate;
    the remaining fields exist for export.
    """

    # Identification
    id: str
    key: str

    # Core fields
    title: str
    status: TicketStatus = TicketStatus.TODO
    description: Optional[str] = None

    # Classification
    priority: TicketPriority = TicketPriority.MEDIUM
    labels: List[str] = Field(default_factory=list)
    story_points: Optional[float] = None

    # People
    assignee: Optional[str] = None      # display name
    assignee_id: Optional[str] = None
    reporter: Optional[str] = None

    # Timing
    created: datetime = Field(default_factory=datetime.now)
    updated: datetime = Field(default_factory=datetime.now)

    def is_in_status(self, statuses) -> bool:
        """Check the ticket status against a collection of status names."""
        return self.status.value in {str(getattr(s, "value", s)) for s in statuses}
