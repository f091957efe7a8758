"""Dependency Injection Module."""
import logging
from typing import Optional

from rotator.core.config import settings
from rotator.domain.accounts import AccountService
from rotator.domain.interfaces import KeyValueStore
from rotator.domain.repositories import AccountRepository, TargetRepository
from rotator.domain.secrets.ports import PasswordChanger
from rotator.domain.secrets.rotation import RotationService
from rotator.domain.targets import TargetService

logger = logging.getLogger(__name__)

_store_instance: Optional[KeyValueStore] = None
_password_changer_instance: Optional[PasswordChanger] = None
_rotation_service_instance: Optional[RotationService] = None


def get_store() -> KeyValueStore:
    """Process-wide store selected by STORE_BACKEND."""
    global _store_instance
    if _store_instance is None:
        backend = settings.STORE_BACKEND.lower()
        if backend == "memory":
            from rotator.adapters.memory_store.stores import MemoryKeyValueStore
            _store_instance = MemoryKeyValueStore()
        elif backend == "json":
            from rotator.adapters.json_store.stores import JsonFileKeyValueStore
            _store_instance = JsonFileKeyValueStore(settings.JSON_STORE_PATH)
        elif backend == "redis":
            from rotator.adapters.redis.stores import RedisKeyValueStore
            _store_instance = RedisKeyValueStore(key_prefix=settings.REDIS_KEY_PREFIX)
        else:
            raise RuntimeError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")
        logger.info(f"Initialized {backend} store")
    return _store_instance


def get_target_repository() -> TargetRepository:
    return TargetRepository(get_store())


def get_account_repository() -> AccountRepository:
    return AccountRepository(get_store())


def get_password_changer() -> PasswordChanger:
    global _password_changer_instance
    if _password_changer_instance is None:
        from rotator.adapters.semp.client import SempClient
        _password_changer_instance = SempClient()
    return _password_changer_instance


def get_rotation_service() -> RotationService:
    """The single RotationService; its lock is the process-wide rotation lock."""
    global _rotation_service_instance
    if _rotation_service_instance is None:
        _rotation_service_instance = RotationService(
            get_target_repository(),
            get_account_repository(),
            get_password_changer(),
        )
    return _rotation_service_instance


def get_target_service() -> TargetService:
    return TargetService(get_target_repository(), get_account_repository())


def get_account_service() -> AccountService:
    return AccountService(get_account_repository(), get_target_repository())


def reset_dependencies(
    store: Optional[KeyValueStore] = None,
    password_changer: Optional[PasswordChanger] = None,
) -> None:
    """Drop cached singletons, optionally seeding replacements."""
    global _store_instance, _password_changer_instance, _rotation_service_instance
    _store_instance = store
    _password_changer_instance = password_changer
    _rotation_service_instance = None
