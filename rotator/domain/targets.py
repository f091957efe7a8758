"""Target configuration surface."""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import ValidationError

from rotator.domain.errors import ConflictError, ValidationFailure
from rotator.domain.models import Target, is_valid_name
from rotator.domain.repositories import AccountRepository, TargetRepository

logger = logging.getLogger(__name__)

TARGET_FIELDS = {"url", "admin_username", "admin_password", "semp_version", "tls_skip_verify"}


class TargetService:
    def __init__(self, targets: TargetRepository, accounts: AccountRepository):
        self.targets = targets
        self.accounts = accounts

    async def write(self, name: str, fields: Dict[str, Any]) -> Target:
        """Create or merge-update a target; unspecified fields keep their stored value."""
        if not is_valid_name(name):
            raise ValidationFailure(f"invalid target name {name!r}")
        unknown = set(fields) - TARGET_FIELDS
        if unknown:
            raise ValidationFailure(f"unknown target fields: {', '.join(sorted(unknown))}")

        existing = await self.targets.get(name)
        merged = existing.model_dump() if existing else {"url": "", "admin_username": "", "admin_password": ""}
        merged.update({k: v for k, v in fields.items() if v is not None})
        merged["name"] = name

        _validate_url(merged.get("url") or "")
        if not merged.get("admin_username"):
            raise ValidationFailure("admin_username is required")
        if not merged.get("admin_password"):
            raise ValidationFailure("admin_password is required")

        try:
            target = Target.model_validate(merged)
        except ValidationError as e:
            raise ValidationFailure(f"invalid target {name!r}: {e.errors()[0]['msg']}")

        await self.targets.put(name, target)
        logger.info(f"Target {'updated' if existing else 'created'}: {name}")
        return target

    async def read(self, name: str) -> Optional[Dict[str, Any]]:
        target = await self.targets.get(name)
        return target.redacted() if target else None

    async def delete(self, name: str) -> None:
        referencing = []
        for account_name in await self.accounts.list():
            account = await self.accounts.get(account_name)
            if account is not None and account.target == name:
                referencing.append(account_name)
        if referencing:
            raise ConflictError(f"target {name!r} is referenced by accounts: {', '.join(referencing)}")
        await self.targets.delete(name)
        logger.info(f"Target deleted: {name}")

    async def list(self) -> List[str]:
        return await self.targets.list()


def _validate_url(url: str) -> None:
    if not url:
        raise ValidationFailure("url is required")
    if any(ch.isspace() or not ch.isprintable() for ch in url):
        raise ValidationFailure("url must not contain whitespace or control characters")
    try:
        parsed = urlparse(url)
        parsed.port  # raises ValueError for a non-numeric or out-of-range port
    except ValueError:
        raise ValidationFailure("url is not a valid URL")
    if parsed.scheme not in ("http", "https"):
        raise ValidationFailure("url must use http or https scheme")
    if not parsed.netloc or not parsed.hostname:
        raise ValidationFailure("url must include a host")
    # The SEMP path is appended to the base URL.
    if parsed.query or parsed.fragment or url.endswith(("?", "#")):
        raise ValidationFailure("url must not include a query or fragment")
