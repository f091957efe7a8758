import pytest
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from rotator.adapters.memory_store.stores import MemoryKeyValueStore
from rotator.domain.errors import RemoteFailure
from rotator.domain.models import ManagedAccount, Target
from rotator.domain.repositories import AccountRepository, TargetRepository
from rotator.domain.secrets.ports import PasswordChanger
from rotator.domain.secrets.rotation import RotationService

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FakePasswordChanger(PasswordChanger):
    """Programmable stand-in for the SEMP client."""

    def __init__(self, error: Optional[RemoteFailure] = None):
        self.error = error
        self.calls: List[Tuple[str, str, str]] = []

    async def change_password(self, target: Target, remote_username: str, new_password: str) -> None:
        self.calls.append((target.name, remote_username, new_password))
        if self.error is not None:
            raise self.error


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def targets(store):
    return TargetRepository(store)


@pytest.fixture
def accounts(store):
    return AccountRepository(store)


@pytest.fixture
def changer():
    return FakePasswordChanger()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(targets, accounts, changer, clock):
    return RotationService(targets, accounts, changer, clock=clock)


@pytest.fixture
def target():
    return Target(
        name="broker-1",
        url="https://broker-1.example.com:8080",
        admin_username="admin",
        admin_password="adminpass",
        semp_version="soltr/10_4",
    )


def make_account(name: str = "monitor", **overrides) -> ManagedAccount:
    fields = {
        "name": name,
        "target": "broker-1",
        "remote_username": name,
        "rotation_period": 0,
    }
    fields.update(overrides)
    return ManagedAccount(**fields)
