"""JSON File-based Store Implementation (single-node deployments)."""
import asyncio
import json
import os
import logging
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional

from rotator.adapters.memory_store.stores import list_children
from rotator.domain.interfaces import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Keeps every key in one JSON document, replaced atomically on write.

    File IO runs in a worker thread. Writes are not coordinated across
    processes, so only one process may use a given file.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._write_lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _put(self, key: str, value: str) -> None:
        with self._write_lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def _delete(self, key: str) -> None:
        with self._write_lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)

    async def get(self, key: str) -> Optional[bytes]:
        value = (await asyncio.to_thread(self._load)).get(key)
        return value.encode("utf-8") if value is not None else None

    async def put(self, key: str, value: bytes) -> None:
        await asyncio.to_thread(self._put, key, value.decode("utf-8"))

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

    async def list(self, prefix: str) -> List[str]:
        data = await asyncio.to_thread(self._load)
        return list_children(data.keys(), prefix)
