"""Rotation Domain Models."""
import re
from datetime import datetime, timedelta
from typing import Optional
from pydantic import BaseModel, Field, field_validator

# Word characters, with dots and hyphens allowed inside; no path separators.
NAME_PATTERN = r"^\w(?:[\w.-]*\w)?$"

MIN_PASSWORD_LENGTH = 16
MAX_PASSWORD_LENGTH = 128
DEFAULT_PASSWORD_LENGTH = 32


class Target(BaseModel):
    """A remote device's SEMP endpoint and the admin credentials used to rotate on it."""
    name: str = Field(..., min_length=1, pattern=NAME_PATTERN)
    url: str
    admin_username: str
    admin_password: str
    semp_version: Optional[str] = None
    tls_skip_verify: bool = False

    def redacted(self) -> dict:
        return self.model_dump(exclude={"admin_password"})


class ManagedAccount(BaseModel):
    """
    A remote CLI account whose password this service owns.

    ``password`` and ``last_rotated`` are written only by a successful
    rotation. ``last_rotated is None`` means the account has never been
    rotated and has no password to serve.
    """
    name: str = Field(..., min_length=1, pattern=NAME_PATTERN)
    target: str = Field(..., min_length=1)
    remote_username: str = Field(..., min_length=1)
    rotation_period: int = Field(default=0, ge=0)  # seconds, 0 disables
    password_length: Optional[int] = Field(default=None, ge=MIN_PASSWORD_LENGTH, le=MAX_PASSWORD_LENGTH)
    password: Optional[str] = None
    last_rotated: Optional[datetime] = None

    @field_validator("last_rotated")
    @classmethod
    def require_aware(cls, v):
        if v is not None and v.tzinfo is None:
            raise ValueError("last_rotated must be timezone-aware")
        return v

    @property
    def is_rotated(self) -> bool:
        return self.last_rotated is not None

    @property
    def effective_password_length(self) -> int:
        return self.password_length or DEFAULT_PASSWORD_LENGTH

    @property
    def rotation_interval(self) -> timedelta:
        return timedelta(seconds=self.rotation_period)

    def config_view(self) -> dict:
        return self.model_dump(exclude={"password"})


class Credentials(BaseModel):
    """What a credential reader is handed for a rotated account."""
    remote_username: str
    password: str
    target: str
    last_rotated: datetime


def is_valid_name(name: str) -> bool:
    return isinstance(name, str) and re.fullmatch(NAME_PATTERN, name) is not None
