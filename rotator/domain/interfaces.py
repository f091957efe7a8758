"""Domain interfaces for persistence stores."""
from abc import ABC, abstractmethod
from typing import List, Optional


class KeyValueStore(ABC):
    """Byte-oriented keyed store.

    Single-key writes are atomic. No multi-key transactions are offered.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]: pass

    @abstractmethod
    async def put(self, key: str, value: bytes) -> None: pass

    @abstractmethod
    async def delete(self, key: str) -> None: pass

    @abstractmethod
    async def list(self, prefix: str) -> List[str]:
        """Return the sorted key suffixes found directly under ``prefix``."""
        pass
