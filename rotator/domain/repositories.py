"""Typed repositories over a KeyValueStore."""
from typing import Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from rotator.domain.interfaces import KeyValueStore
from rotator.domain.models import ManagedAccount, Target

TARGET_PREFIX = "config/targets/"
ACCOUNT_PREFIX = "accounts/"

ModelT = TypeVar("ModelT", bound=BaseModel)


class Repository(Generic[ModelT]):
    """get/put/delete/list for one entity kind under one key prefix."""
    prefix: str
    model: Type[ModelT]

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    async def get(self, name: str) -> Optional[ModelT]:
        raw = await self.store.get(self._key(name))
        if raw is None:
            return None
        return self.model.model_validate_json(raw)

    async def put(self, name: str, entity: ModelT) -> None:
        await self.store.put(self._key(name), entity.model_dump_json().encode("utf-8"))

    async def delete(self, name: str) -> None:
        await self.store.delete(self._key(name))

    async def list(self) -> List[str]:
        return await self.store.list(self.prefix)


class TargetRepository(Repository[Target]):
    prefix = TARGET_PREFIX
    model = Target


class AccountRepository(Repository[ManagedAccount]):
    prefix = ACCOUNT_PREFIX
    model = ManagedAccount
