"""Memory Store Implementations."""
from typing import Dict, List, Optional
import logging

from rotator.domain.interfaces import KeyValueStore

logger = logging.getLogger(__name__)


def list_children(keys, prefix: str) -> List[str]:
    """Names directly under ``prefix``; nested paths collapse to ``child/``."""
    names = set()
    for key in keys:
        if not key.startswith(prefix):
            continue
        rest = key[len(prefix):]
        if not rest:
            continue
        head, sep, _ = rest.partition("/")
        names.add(head + sep)
    return sorted(names)


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self._data: Dict[str, bytes] = {}

    async def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    async def put(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def list(self, prefix: str) -> List[str]:
        return list_children(self._data.keys(), prefix)
