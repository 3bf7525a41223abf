"""
Single-ticket mutation primitives used by the batch engine.

The engine only sees ``MutationPrimitives``; whether a primitive calls the
issue tracker or the in-memory store below is up to whoever wires it.
A primitive signals failure by raising.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from ..models import LabelsAction, Ticket, TicketPriority, TicketStatus
from .exceptions import EntityOperationError

logger = logging.getLogger(__name__)

MovePrimitive = Callable[[Ticket, str], Awaitable[None]]
AssignPrimitive = Callable[[Ticket, str, Optional[str]], Awaitable[None]]
PriorityPrimitive = Callable[[Ticket, str], Awaitable[None]]
LabelsPrimitive = Callable[[Ticket, str, List[str]], Awaitable[None]]
DeletePrimitive = Callable[[Ticket], Awaitable[None]]

# (operation type, ticket) -> error message, or None for success
OutcomeFunction = Callable[[str, Ticket], Optional[str]]


@dataclass(frozen=True)
class MutationPrimitives:
    """Injected per-type mutation functions. Missing ones are engine errors."""
    move_ticket: Optional[MovePrimitive] = None
    assign_ticket: Optional[AssignPrimitive] = None
    set_priority: Optional[PriorityPrimitive] = None
    set_labels: Optional[LabelsPrimitive] = None
    delete_ticket: Optional[DeletePrimitive] = None


def apply_labels(existing: Sequence[str], action: str, labels: Sequence[str]) -> List[str]:
    """Combine label lists, keeping first-seen order and no duplicates."""
    action = str(getattr(action, "value", action))
    if action == LabelsAction.REPLACE.value:
        combined = list(labels)
    elif action == LabelsAction.ADD.value:
        combined = list(existing) + list(labels)
    elif action == LabelsAction.REMOVE.value:
        removed = set(labels)
        combined = [label for label in existing if label not in removed]
    else:
        raise ValueError(f"Unknown labels action: {action}")
    return list(dict.fromkeys(combined))


class InMemoryTicketStore:
    """
    Simulated tracker backing the mutation primitives.

    Every call is recorded in ``calls``. The injectable ``outcome``
    function decides per call whether it fails, which keeps demo and test
    failures deterministic.
    """

    def __init__(
        self,
        tickets: Sequence[Ticket] = (),
        outcome: Optional[OutcomeFunction] = None,
        latency: float = 0.0,
    ):
        self._tickets: Dict[str, Ticket] = {t.id: t for t in tickets}
        self.outcome = outcome
        self.latency = latency
        self.calls: List[Tuple[str, str]] = []

    def get(self, ticket_id: str) -> Optional[Ticket]:
        return self._tickets.get(ticket_id)

    @property
    def tickets(self) -> List[Ticket]:
        return list(self._tickets.values())

    def primitives(self) -> MutationPrimitives:
        return MutationPrimitives(
            move_ticket=self.move_ticket,
            assign_ticket=self.assign_ticket,
            set_priority=self.set_priority,
            set_labels=self.set_labels,
            delete_ticket=self.delete_ticket,
        )

    async def move_ticket(self, ticket: Ticket, target_status: str):
        current = await self._begin("move", ticket)
        self._update(current, status=TicketStatus(target_status))

    async def assign_ticket(self, ticket: Ticket, assignee_id: str, assignee_name: Optional[str] = None):
        current = await self._begin("assign", ticket)
        self._update(current, assignee_id=assignee_id, assignee=assignee_name or assignee_id)

    async def set_priority(self, ticket: Ticket, priority: str):
        current = await self._begin("priority", ticket)
        self._update(current, priority=TicketPriority(priority))

    async def set_labels(self, ticket: Ticket, action: str, labels: List[str]):
        current = await self._begin("labels", ticket)
        self._update(current, labels=apply_labels(current.labels, action, labels))

    async def delete_ticket(self, ticket: Ticket):
        await self._begin("delete", ticket)
        del self._tickets[ticket.id]
        logger.debug(f"Deleted {ticket.key}")

    async def _begin(self, operation_type: str, ticket: Ticket) -> Ticket:
        """Record the call, simulate latency, apply the outcome function."""
        self.calls.append((operation_type, ticket.id))

        if self.latency:
            await asyncio.sleep(self.latency)

        current = self._tickets.get(ticket.id)
        if current is None:
            raise EntityOperationError(f"Ticket {ticket.key} not found", entity_id=ticket.id)

        if self.outcome:
            error = self.outcome(operation_type, current)
            if error:
                raise EntityOperationError(error, entity_id=ticket.id)

        return current

    def _update(self, ticket: Ticket, **changes):
        changes["updated"] = datetime.now()
        self._tickets[ticket.id] = ticket.model_copy(update=changes)


def fail_for(ticket_ids, message: str = "Simulated failure") -> OutcomeFunction:
    """Outcome function failing a fixed set of tickets on every operation."""
    failing = set(ticket_ids)

    def outcome(operation_type: str, ticket: Ticket) -> Optional[str]:
        if ticket.id in failing:
            return f"{message}: {operation_type} {ticket.key}"
        return None

    return outcome
