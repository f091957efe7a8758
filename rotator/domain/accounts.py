"""Managed account configuration and credential read surfaces."""
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from rotator.domain.errors import NotFoundError, NotRotatedError, ValidationFailure
from rotator.domain.models import (
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
    Credentials,
    ManagedAccount,
    is_valid_name,
)
from rotator.domain.repositories import AccountRepository, TargetRepository

logger = logging.getLogger(__name__)

ACCOUNT_FIELDS = {"target", "remote_username", "rotation_period", "password_length"}
ROTATION_OWNED_FIELDS = {"password", "last_rotated"}


class AccountService:
    def __init__(self, accounts: AccountRepository, targets: TargetRepository):
        self.accounts = accounts
        self.targets = targets

    async def write(self, name: str, fields: Dict[str, Any]) -> ManagedAccount:
        """
        Create or merge-update a managed account.

        The password and last_rotated fields are owned by rotation: they are
        rejected here and carried over unchanged from the stored record.
        """
        if not is_valid_name(name):
            raise ValidationFailure(f"invalid account name {name!r}")
        owned = set(fields) & ROTATION_OWNED_FIELDS
        if owned:
            raise ValidationFailure(f"{', '.join(sorted(owned))} cannot be set directly; use rotate")
        unknown = set(fields) - ACCOUNT_FIELDS
        if unknown:
            raise ValidationFailure(f"unknown account fields: {', '.join(sorted(unknown))}")

        existing = await self.accounts.get(name)
        merged = existing.model_dump() if existing else {}
        merged.update({k: v for k, v in fields.items() if v is not None})
        merged["name"] = name

        if not merged.get("target"):
            raise ValidationFailure("target is required")
        if not merged.get("remote_username"):
            raise ValidationFailure("remote_username is required")
        length = merged.get("password_length")
        if length is not None and (not isinstance(length, int) or not MIN_PASSWORD_LENGTH <= length <= MAX_PASSWORD_LENGTH):
            raise ValidationFailure(
                f"password_length must be between {MIN_PASSWORD_LENGTH} and {MAX_PASSWORD_LENGTH}"
            )
        if (merged.get("rotation_period") or 0) < 0:
            raise ValidationFailure("rotation_period must not be negative")

        # Only checked here; deleting the target later leaves a dangling reference.
        if await self.targets.get(merged["target"]) is None:
            raise ValidationFailure(f"target {merged['target']!r} not found")

        try:
            account = ManagedAccount.model_validate(merged)
        except ValidationError as e:
            raise ValidationFailure(f"invalid account {name!r}: {e.errors()[0]['msg']}")

        await self.accounts.put(name, account)
        logger.info(f"Account {'updated' if existing else 'created'}: {name} target={account.target}")
        return account

    async def read(self, name: str) -> Optional[Dict[str, Any]]:
        account = await self.accounts.get(name)
        return account.config_view() if account else None

    async def delete(self, name: str) -> None:
        await self.accounts.delete(name)
        logger.info(f"Account deleted: {name}")

    async def list(self) -> List[str]:
        return await self.accounts.list()

    async def read_credentials(self, name: str) -> Credentials:
        """Current credentials. Takes no rotation lock; store reads are atomic per key."""
        account = await self.accounts.get(name)
        if account is None:
            raise NotFoundError(f"account {name!r} not found")
        if not account.is_rotated or not account.password:
            raise NotRotatedError(f"password for account {name!r} has not been rotated yet; rotate it first")
        return Credentials(
            remote_username=account.remote_username,
            password=account.password,
            target=account.target,
            last_rotated=account.last_rotated,
        )
