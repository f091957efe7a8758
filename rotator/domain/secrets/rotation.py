"""Password Rotation Service.

This module is the only writer of a managed account's password and
last_rotated fields. A rotation runs as one critical section:

    load account -> cooldown check -> load target -> generate ->
    remote change -> store write

guarded by a single process-wide lock. The lock is held across the remote
call, so a slow target delays every other pending rotation, including
rotations of unrelated accounts. The SEMP timeout is the only bound on how
long that can last.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from rotator.domain.errors import (
    NotFoundError,
    PersistenceFailure,
    RateLimitedError,
    RemoteFailure,
)
from rotator.domain.models import ManagedAccount
from rotator.domain.repositories import AccountRepository, TargetRepository
from rotator.domain.secrets.generator import generate_password
from rotator.domain.secrets.ports import PasswordChanger

logger = logging.getLogger(__name__)

# Minimum time between two completed rotations of the same account.
ROTATION_COOLDOWN = timedelta(seconds=60)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RotationService:
    """Service for rotating managed account passwords."""

    def __init__(
        self,
        targets: TargetRepository,
        accounts: AccountRepository,
        password_changer: PasswordChanger,
        clock: Callable[[], datetime] = utcnow,
        generator: Callable[[int], str] = generate_password,
    ):
        self.targets = targets
        self.accounts = accounts
        self.password_changer = password_changer
        self.clock = clock
        self.generator = generator
        self._lock = asyncio.Lock()

    async def rotate(self, name: str) -> ManagedAccount:
        """
        Rotate the password of the named account.

        Returns:
            The account record as persisted after the rotation.

        Raises:
            NotFoundError: account, or the target it references, is missing.
            RateLimitedError: the account was rotated less than ROTATION_COOLDOWN ago.
            TransportFailure / ProtocolFailure: the remote change failed; nothing was stored.
            PersistenceFailure: the remote change succeeded but the store write failed.
        """
        async with self._lock:
            account = await self.accounts.get(name)
            if account is None:
                raise NotFoundError(f"account {name!r} not found")

            now = self.clock()
            self._check_cooldown(account, now)

            target = await self.targets.get(account.target)
            if target is None:
                raise NotFoundError(f"target {account.target!r} not found for account {name!r}")

            new_password = self.generator(account.effective_password_length)

            try:
                await self.password_changer.change_password(target, account.remote_username, new_password)
            except RemoteFailure as e:
                logger.error(
                    f"SEMP password change failed: account={name} remote_username={account.remote_username} "
                    f"target={account.target} code={e.code} error={e.detail or e.message}"
                )
                raise type(e)(f"failed to rotate password for account {name!r} on target {account.target!r}") from None

            rotated = account.model_copy(update={"password": new_password, "last_rotated": self.clock()})
            try:
                await self.accounts.put(name, rotated)
            except Exception as e:
                logger.critical(
                    f"password changed on target but failed to store it; manual recovery required: "
                    f"account={name} remote_username={account.remote_username} target={account.target} "
                    f"new_password={new_password} error={e}"
                )
                raise PersistenceFailure(
                    f"password for account {name!r} was changed on target {account.target!r} "
                    f"but could not be stored; manual recovery required"
                ) from e

            logger.info(f"Rotated password: account={name} target={account.target} at={rotated.last_rotated.isoformat()}")
            return rotated

    def _check_cooldown(self, account: ManagedAccount, now: datetime) -> None:
        if account.last_rotated is None:
            return
        elapsed = now - account.last_rotated
        if elapsed < ROTATION_COOLDOWN:
            retry_after = int((ROTATION_COOLDOWN - elapsed).total_seconds()) + 1
            raise RateLimitedError(
                f"account {account.name!r} was rotated {int(elapsed.total_seconds())}s ago; "
                f"retry in {retry_after}s",
                retry_after=retry_after,
            )


def is_due(account: ManagedAccount, now: Optional[datetime] = None) -> bool:
    """True when the scheduler should rotate ``account`` at ``now``.

    Accounts that were never rotated are never due: the first rotation is
    always an explicit one.
    """
    if account.rotation_period == 0 or account.last_rotated is None:
        return False
    now = now or utcnow()
    return now >= account.last_rotated + account.rotation_interval
