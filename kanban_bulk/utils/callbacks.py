"""Invoking caller-supplied callbacks that may be sync or async."""

import inspect
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


async def call_collaborator(callback: Callable, value: Any, name: str):
    """Invoke a sync or async collaborator; its failures are only logged."""
    try:
        returned = callback(value)
        if inspect.isawaitable(returned):
            await returned
    except Exception as e:
        logger.error(f"{name} callback failed: {e}")
