"""
Key/value storage for the persisted selection.

The selection store only needs ``get``/``set`` of a serialized id list.
Two adapters are provided: a process-local dict and a shared Redis
backend built on ``redis.asyncio``.
"""
import redis.asyncio as redis
import logging
from typing import Dict, Optional, Protocol
from config.settings import get_settings

logger = logging.getLogger(__name__)


class SelectionStorage(Protocol):
    """Persistence port used by SelectionStore."""

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""

    async def set(self, key: str, value: str) -> bool:
        """Store a value, returning True on success."""


class InMemorySelectionStorage:
    """Dict-backed storage. Survives only as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True


class RedisSelectionStorage:
    """
    Redis-backed storage shared between board sessions.

    Connection problems are logged and reported as a miss (``get``) or
    ``False`` (``set``); a lost selection is never worth failing a
    user interaction over.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        prefix: Optional[str] = None,
        client: Optional[redis.Redis] = None,
    ):
        settings = get_settings()
        self.redis_url = redis_url if redis_url is not None else settings.redis_url
        self.prefix = prefix if prefix is not None else settings.redis_key_prefix
        self._client = client

    async def _get_client(self) -> Optional[redis.Redis]:
        """Get or create the Redis client. None if Redis is not configured."""
        if self._client is not None:
            return self._client

        if not self.redis_url:
            logger.warning("Redis URL not configured - selection will not be shared")
            return None

        try:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
            )
            await self._client.ping()
            logger.info("Redis selection storage connected")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self._client = None

        return self._client

    async def get(self, key: str) -> Optional[str]:
        client = await self._get_client()
        if not client:
            return None

        try:
            return await client.get(f"{self.prefix}{key}")
        except Exception as e:
            logger.error(f"Selection storage get error for {key}: {e}")
            return None

    async def set(self, key: str, value: str) -> bool:
        client = await self._get_client()
        if not client:
            return False

        try:
            await client.set(f"{self.prefix}{key}", value)
            return True
        except Exception as e:
            logger.error(f"Selection storage set error for {key}: {e}")
            return False

    async def close(self):
        """Close the Redis connection."""
        if self._client:
            try:
                await self._client.aclose()
                logger.info("Redis selection storage closed")
            except Exception as e:
                logger.error(f"Error closing Redis: {e}")
            finally:
                self._client = None
