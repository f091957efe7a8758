"""Redis Store Implementation."""
from typing import Awaitable, Callable, List, Optional
import logging

import redis.asyncio as redis

from rotator.adapters.memory_store.stores import list_children
from rotator.adapters.redis.client import get_redis
from rotator.domain.interfaces import KeyValueStore

logger = logging.getLogger(__name__)


class RedisKeyValueStore(KeyValueStore):
    """One Redis string per key, namespaced by ``key_prefix``."""

    def __init__(self, key_prefix: str = "rotator:", client_factory: Callable[[], Awaitable[redis.Redis]] = get_redis):
        self.key_prefix = key_prefix
        self._client_factory = client_factory

    def _k(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Optional[bytes]:
        r = await self._client_factory()
        return await r.get(self._k(key))

    async def put(self, key: str, value: bytes) -> None:
        r = await self._client_factory()
        await r.set(self._k(key), value)

    async def delete(self, key: str) -> None:
        r = await self._client_factory()
        await r.delete(self._k(key))

    async def list(self, prefix: str) -> List[str]:
        r = await self._client_factory()
        full_prefix = self._k(prefix)
        keys = []
        async for raw in r.scan_iter(match=f"{_glob_escape(full_prefix)}*"):
            key = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            keys.append(key[len(self.key_prefix):])
        return list_children(keys, prefix)


def _glob_escape(value: str) -> str:
    return "".join(f"\\{ch}" if ch in "*?[]\\" else ch for ch in value)
