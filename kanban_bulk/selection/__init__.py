"""
Selection module: selected ticket ids plus their persistence port.
"""

from .storage import SelectionStorage, InMemorySelectionStorage, RedisSelectionStorage
from .store import SelectionStore

__all__ = [
    "SelectionStorage",
    "InMemorySelectionStorage",
    "RedisSelectionStorage",
    "SelectionStore",
]
