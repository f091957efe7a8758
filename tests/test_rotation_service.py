"""Tests for the rotation orchestrator."""
import asyncio
import logging
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from conftest import NOW, FakePasswordChanger, make_account
from rotator.domain.errors import (
    NotFoundError,
    PersistenceFailure,
    ProtocolFailure,
    RateLimitedError,
    TransportFailure,
)
from rotator.domain.secrets.rotation import ROTATION_COOLDOWN, RotationService


async def seed(targets, accounts, target, account):
    await targets.put(target.name, target)
    await accounts.put(account.name, account)


@pytest.mark.asyncio
async def test_first_rotation_stores_password_and_timestamp(service, targets, accounts, changer, target):
    await seed(targets, accounts, target, make_account(password_length=40))

    result = await service.rotate("monitor")

    stored = await accounts.get("monitor")
    assert stored.password == result.password
    assert len(stored.password) == 40
    assert stored.last_rotated == NOW
    assert changer.calls == [("broker-1", "monitor", stored.password)]


@pytest.mark.asyncio
async def test_default_length_used_when_unset(service, targets, accounts, target):
    await seed(targets, accounts, target, make_account())

    result = await service.rotate("monitor")

    assert len(result.password) == 32


@pytest.mark.asyncio
async def test_missing_account_is_not_found(service, changer):
    with pytest.raises(NotFoundError, match="account 'ghost' not found"):
        await service.rotate("ghost")
    assert changer.calls == []


@pytest.mark.asyncio
async def test_dangling_target_is_not_found_and_nothing_changes(service, targets, accounts, changer, target, clock):
    before = make_account(password="old-password-value", last_rotated=NOW - timedelta(days=2))
    await seed(targets, accounts, target, before)
    await targets.delete("broker-1")

    with pytest.raises(NotFoundError, match="target 'broker-1' not found"):
        await service.rotate("monitor")

    assert changer.calls == []
    assert await accounts.get("monitor") == before


@pytest.mark.asyncio
async def test_back_to_back_rotations_are_rate_limited(service, targets, accounts, changer, target):
    await seed(targets, accounts, target, make_account())

    first = await service.rotate("monitor")
    with pytest.raises(RateLimitedError) as exc_info:
        await service.rotate("monitor")

    assert len(changer.calls) == 1
    assert (await accounts.get("monitor")).password == first.password
    assert 0 < exc_info.value.retry_after <= ROTATION_COOLDOWN.total_seconds()


@pytest.mark.asyncio
async def test_rotation_allowed_after_cooldown(service, targets, accounts, changer, target, clock):
    await seed(targets, accounts, target, make_account())

    first = await service.rotate("monitor")
    clock.advance(seconds=ROTATION_COOLDOWN.total_seconds())
    second = await service.rotate("monitor")

    assert second.password != first.password
    assert second.last_rotated == NOW + ROTATION_COOLDOWN
    assert len(changer.calls) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    TransportFailure("SEMP request failed", detail="connection refused to 10.0.0.5"),
    ProtocolFailure("SEMP command failed", detail="SEMP command failed: Invalid username"),
])
async def test_remote_failure_leaves_store_untouched(targets, accounts, target, clock, error):
    changer = FakePasswordChanger(error=error)
    service = RotationService(targets, accounts, changer, clock=clock)
    before = make_account(password="old-password-value", last_rotated=NOW - timedelta(days=2))
    await seed(targets, accounts, target, before)
    raw_before = await accounts.store.get("accounts/monitor")

    with pytest.raises(type(error)):
        await service.rotate("monitor")

    assert await accounts.store.get("accounts/monitor") == raw_before


@pytest.mark.asyncio
async def test_remote_rejection_is_sanitized_for_caller_but_logged(targets, accounts, target, clock, caplog):
    changer = FakePasswordChanger(
        error=ProtocolFailure("SEMP command failed", detail="SEMP command failed: Invalid username")
    )
    service = RotationService(targets, accounts, changer, clock=clock)
    await seed(targets, accounts, target, make_account())

    with caplog.at_level(logging.ERROR, logger="rotator.domain.secrets.rotation"):
        with pytest.raises(ProtocolFailure) as exc_info:
            await service.rotate("monitor")

    assert "Invalid username" not in str(exc_info.value)
    assert exc_info.value.detail is None
    assert "Invalid username" in caplog.text
    assert (await accounts.get("monitor")).password is None


@pytest.mark.asyncio
async def test_store_write_failure_requires_manual_recovery(targets, accounts, target, changer, clock, caplog):
    service = RotationService(targets, accounts, changer, clock=clock)
    await seed(targets, accounts, target, make_account())
    accounts.put = AsyncMock(side_effect=OSError("disk full"))

    with caplog.at_level(logging.CRITICAL, logger="rotator.domain.secrets.rotation"):
        with pytest.raises(PersistenceFailure, match="manual recovery required") as exc_info:
            await service.rotate("monitor")

    new_password = changer.calls[0][2]
    assert new_password not in str(exc_info.value)
    assert new_password in caplog.text
    assert exc_info.value.code == "MANUAL_RECOVERY_REQUIRED"


@pytest.mark.asyncio
async def test_rotations_are_serialized_across_accounts(targets, accounts, target, clock):
    """No two rotations interleave, even for different accounts."""
    in_flight = 0
    max_in_flight = 0

    class SlowChanger(FakePasswordChanger):
        async def change_password(self, target, remote_username, new_password):
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            await super().change_password(target, remote_username, new_password)

    changer = SlowChanger()
    service = RotationService(targets, accounts, changer, clock=clock)
    await targets.put(target.name, target)
    for name in ("a", "b", "c"):
        await accounts.put(name, make_account(name))

    await asyncio.gather(*(service.rotate(name) for name in ("a", "b", "c")))

    assert max_in_flight == 1
    assert len(changer.calls) == 3


@pytest.mark.asyncio
async def test_concurrent_rotations_of_one_account_call_remote_once(service, targets, accounts, changer, target):
    await seed(targets, accounts, target, make_account())

    results = await asyncio.gather(
        service.rotate("monitor"), service.rotate("monitor"), return_exceptions=True
    )

    assert sum(1 for r in results if isinstance(r, RateLimitedError)) == 1
    assert len(changer.calls) == 1
