"""
Pytest configuration and shared fixtures.
"""

import pytest

from kanban_bulk.models import Ticket, TicketPriority, TicketStatus
from kanban_bulk.operations import InMemoryTicketStore, default_catalog
from kanban_bulk.selection import InMemorySelectionStorage, SelectionStore


@pytest.fixture
def sample_tickets():
    """Five board tickets in display order."""
    return [
        Ticket(id="T1", key="BOARD-1", title="Login page", status=TicketStatus.TODO,
               priority=TicketPriority.HIGH, labels=["frontend"], assignee="Ana", story_points=3),
        Ticket(id="T2", key="BOARD-2", title="Fix payments, refunds", status=TicketStatus.IN_REVIEW,
               priority=TicketPriority.MEDIUM, labels=["backend", "billing"]),
        Ticket(id="T3", key="BOARD-3", title="Dark mode", status=TicketStatus.DONE,
               priority=TicketPriority.LOW),
        Ticket(id="T4", key="BOARD-4", title="Search index", status=TicketStatus.IN_PROGRESS,
               priority=TicketPriority.HIGHEST),
        Ticket(id="T5", key="BOARD-5", title="Onboarding email", status=TicketStatus.TODO),
    ]


@pytest.fixture
def three_tickets(sample_tickets):
    """T1..T3, none of them in progress."""
    return sample_tickets[:3]


@pytest.fixture
def storage():
    return InMemorySelectionStorage()


@pytest.fixture
def store(sample_tickets, storage):
    return SelectionStore(sample_tickets, storage=storage)


@pytest.fixture
def ticket_store(sample_tickets):
    """Simulated tracker holding the sample tickets; never fails."""
    return InMemoryTicketStore(sample_tickets)


@pytest.fixture
def catalog():
    return default_catalog()
