"""Redis-backed document store shared by the catalog, orders and users."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import redis.asyncio as redis
from redis.asyncio.client import Pipeline

from pizzeria.config import get_settings
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)


def encode_field(value: Any) -> str:
    """Hash fields are always JSON so types survive the round trip."""
    return json.dumps(value)


def decode_field(value: str) -> Any:
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return value


class StateManager:
    """Centralized state management using Redis."""

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        settings = get_settings()
        self.redis_client: redis.Redis | None = redis_client
        self.redis_url = settings.redis_url

    async def connect(self) -> None:
        """Establish Redis connection."""
        if self.redis_client is None:
            self.redis_client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            logger.info("redis_connected", url=self.redis_url)

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.info("redis_disconnected")

    async def _client(self) -> redis.Redis:
        if not self.redis_client:
            await self.connect()
        return self.redis_client

    async def ping(self) -> bool:
        client = await self._client()
        return bool(await client.ping())

    # Documents

    async def set(self, key: str, value: Any) -> None:
        """Store a document, serializing dicts and lists to JSON."""
        client = await self._client()

        if isinstance(value, (dict, list)):
            value = json.dumps(value)

        await client.set(key, value)
        logger.debug("state_set", key=key)

    async def get(self, key: str) -> Any:
        """Get a document, deserializing JSON when possible."""
        client = await self._client()
        value = await client.get(key)

        if value:
            return decode_field(value)

        return None

    async def mget(self, keys: list[str]) -> list[Any]:
        if not keys:
            return []
        client = await self._client()
        return [decode_field(v) if v else None for v in await client.mget(keys)]

    async def delete(self, *keys: str) -> None:
        client = await self._client()
        await client.delete(*keys)
        logger.debug("state_deleted", keys=keys)

    async def exists(self, key: str) -> bool:
        """Check if a key exists."""
        client = await self._client()
        return bool(await client.exists(key))

    # Hashes

    async def hset(self, key: str, mapping: dict[str, Any]) -> None:
        """Write hash fields, JSON-encoding every value."""
        client = await self._client()
        await client.hset(key, mapping={f: encode_field(v) for f, v in mapping.items()})

    async def hgetall(self, key: str) -> dict[str, Any]:
        """Get all hash fields."""
        client = await self._client()
        data = await client.hgetall(key)
        return {field: decode_field(value) for field, value in data.items()}

    async def hincrby(self, key: str, field: str, amount: int) -> int:
        """Targeted integer field update."""
        client = await self._client()
        return await client.hincrby(key, field, amount)

    # Sets

    async def sadd(self, key: str, *members: str) -> None:
        client = await self._client()
        await client.sadd(key, *members)

    async def smembers(self, key: str) -> set[str]:
        client = await self._client()
        return await client.smembers(key)

    # Sorted sets

    async def zrange(
        self,
        key: str,
        start: int = 0,
        end: int = -1,
        desc: bool = False,
    ) -> list[str]:
        """Get members from a sorted set."""
        client = await self._client()
        return await client.zrange(key, start, end, desc=desc)

    async def zcard(self, key: str) -> int:
        client = await self._client()
        return await client.zcard(key)

    # Pub/sub

    async def publish(self, channel: str, message: Any) -> int:
        """Publish a message to a channel."""
        client = await self._client()

        if isinstance(message, (dict, list)):
            message = json.dumps(message)

        receivers = await client.publish(channel, message)
        logger.debug("message_published", channel=channel, receivers=receivers)
        return receivers

    # Transactions

    @asynccontextmanager
    async def transaction(self, *watch_keys: str) -> AsyncIterator[Pipeline]:
        """
        Open a pipeline that WATCHes the given keys.

        Reads issued before ``pipe.multi()`` execute immediately; commands
        after it are queued and applied atomically by ``pipe.execute()``,
        which raises WatchError if any watched key changed meanwhile.
        """
        client = await self._client()
        async with client.pipeline(transaction=True) as pipe:
            if watch_keys:
                await pipe.watch(*watch_keys)
            yield pipe


# Global state manager instance
_state_manager: StateManager | None = None


async def get_state_manager() -> StateManager:
    """Get the global state manager instance."""
    global _state_manager
    if _state_manager is None:
        _state_manager = StateManager()
        await _state_manager.connect()
    return _state_manager
