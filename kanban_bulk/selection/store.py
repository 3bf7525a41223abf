"""
Selection state for bulk operations.

Holds the set of selected ticket ids against an ordered ticket universe,
keeps derived counts current, and persists the id list through an
injected storage port after every accepted mutation.
"""

import json
import logging
from typing import Any, Callable, FrozenSet, Iterable, List, Optional, Sequence, Set

from config.settings import get_settings
from ..models import SelectionState, Ticket
from ..utils.callbacks import call_collaborator
from .storage import InMemorySelectionStorage, SelectionStorage

logger = logging.getLogger(__name__)


class SelectionStore:
    """Mutable selection of tickets, bounded by the universe and an optional cap."""

    def __init__(
        self,
        tickets: Sequence[Ticket] = (),
        storage: Optional[SelectionStorage] = None,
        max_selection_count: Optional[int] = None,
        storage_key: Optional[str] = None,
        on_selection_change: Optional[Callable[[SelectionState], Any]] = None,
    ):
        settings = get_settings()
        self.storage = storage if storage is not None else InMemorySelectionStorage()
        self.storage_key = storage_key or settings.selection_storage_key
        self.max_selection_count = max_selection_count
        self.on_selection_change = on_selection_change

        self._tickets: List[Ticket] = list(tickets)
        self._selected: Set[str] = set()
        self._state = SelectionState.compute(frozenset(), len(self._tickets))

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def tickets(self) -> List[Ticket]:
        return list(self._tickets)

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def selected_ids(self) -> FrozenSet[str]:
        return frozenset(self._selected)

    @property
    def selected_tickets(self) -> List[Ticket]:
        """Selected tickets in universe order."""
        return [t for t in self._tickets if t.id in self._selected]

    def is_selected(self, ticket_id: str) -> bool:
        return ticket_id in self._selected

    def get_selection_summary(self) -> str:
        count = len(self._selected)
        if count == 0:
            return "No tickets selected"
        if count == 1:
            return "1 ticket selected"
        return f"{count} tickets selected"

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def toggle(self, ticket_id: str) -> bool:
        """
        Add the ticket if absent, remove it if present.

        Returns False when the toggle was rejected (unknown id, or adding
        would exceed the cap). Rejection is silent: nothing is persisted.
        """
        if ticket_id in self._selected:
            await self._commit(self._selected - {ticket_id})
            return True
        return await self.select(ticket_id)

    async def select(self, ticket_id: str) -> bool:
        if ticket_id in self._selected:
            return True
        if ticket_id not in self._universe_ids():
            logger.debug(f"Ignoring selection of unknown ticket {ticket_id}")
            return False
        if self._over_cap(len(self._selected) + 1):
            logger.debug(f"Selection cap {self.max_selection_count} reached, ignoring {ticket_id}")
            return False
        await self._commit(self._selected | {ticket_id})
        return True

    async def deselect(self, ticket_id: str) -> bool:
        if ticket_id not in self._selected:
            return False
        await self._commit(self._selected - {ticket_id})
        return True

    async def select_range(self, start_index: int, end_index: int) -> bool:
        """
        Union the inclusive index range into the selection.

        Argument order does not matter. Indices outside the universe are
        skipped. If the union would exceed the cap the call is rejected
        as a whole.
        """
        start = max(min(start_index, end_index), 0)
        end = min(max(start_index, end_index), len(self._tickets) - 1)

        # empty when the range lies wholly outside the universe
        new_selection = set(self._selected)
        for index in range(start, end + 1):
            new_selection.add(self._tickets[index].id)

        if self._over_cap(len(new_selection)):
            logger.debug(
                f"Range {start_index}..{end_index} would select {len(new_selection)} tickets, "
                f"cap is {self.max_selection_count}"
            )
            return False

        await self._commit(new_selection)
        return True

    async def select_all(self):
        """Select every ticket, truncated to the cap in universe order."""
        ids = [t.id for t in self._tickets]
        if self.max_selection_count is not None:
            ids = ids[:self.max_selection_count]
        await self._commit(set(ids))

    async def deselect_all(self):
        await self._commit(set())

    async def clear(self):
        await self._commit(set())

    async def clear_if_unchanged(self, snapshot_ids: Iterable[str]) -> bool:
        """Clear only if the selection still equals the given snapshot."""
        if frozenset(snapshot_ids) != frozenset(self._selected):
            logger.info("Selection changed during batch, leaving it untouched")
            return False
        await self.clear()
        return True

    async def set_tickets(self, tickets: Sequence[Ticket]):
        """Replace the universe, dropping selected ids that left it."""
        self._tickets = list(tickets)
        universe = self._universe_ids()
        await self._commit({tid for tid in self._selected if tid in universe})

    async def load(self) -> bool:
        """
        Rehydrate the selection from storage.

        Stored ids are intersected with the live universe; stale ids are
        dropped silently. Nothing happens if a selection already exists.
        Returns True when a selection was restored.
        """
        if self._selected:
            return False

        raw = await self.storage.get(self.storage_key)
        if not raw:
            return False

        try:
            stored = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable saved selection: {e}")
            return False
        if not isinstance(stored, list):
            logger.warning("Ignoring saved selection that is not a list")
            return False

        stored_ids = {str(tid) for tid in stored}
        valid_ids = [t.id for t in self._tickets if t.id in stored_ids]
        if self.max_selection_count is not None:
            valid_ids = valid_ids[:self.max_selection_count]
        if not valid_ids:
            return False

        dropped = len(stored_ids) - len(valid_ids)
        if dropped:
            logger.debug(f"Dropped {dropped} saved ids not present on the board")

        await self._commit(set(valid_ids))
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _universe_ids(self) -> Set[str]:
        return {t.id for t in self._tickets}

    def _over_cap(self, size: int) -> bool:
        return self.max_selection_count is not None and size > self.max_selection_count

    async def _commit(self, new_selection: Set[str]):
        """Apply a mutation: recompute state, persist, notify."""
        self._selected = set(new_selection)
        self._state = SelectionState.compute(frozenset(self._selected), len(self._tickets))

        serialized = json.dumps([t.id for t in self._tickets if t.id in self._selected])
        saved = await self.storage.set(self.storage_key, serialized)
        if not saved:
            logger.warning(f"Selection could not be saved under {self.storage_key}")

        if self.on_selection_change:
            await call_collaborator(self.on_selection_change, self._state, "Selection change")
