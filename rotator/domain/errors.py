"""Rotation error taxonomy.

Every error carries a caller-safe ``message`` and an optional ``detail``
that may contain remote-supplied text. ``detail`` is for log sinks only;
``str(exc)`` always returns the safe message.
"""
from typing import Optional


class RotationError(Exception):
    """Base error for the rotation engine."""
    code = "ROTATION_ERROR"
    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        return self.message


class NotFoundError(RotationError):
    """Account or target absent."""
    code = "NOT_FOUND"
    status_code = 404


class ValidationFailure(RotationError):
    """Malformed or out-of-bounds input, caught before any remote call."""
    code = "VALIDATION_ERROR"
    status_code = 400


class ConflictError(RotationError):
    """Configuration change refused because other records depend on it."""
    code = "CONFLICT"
    status_code = 409


class NotRotatedError(RotationError):
    """Credentials requested for an account that has never been rotated."""
    code = "NOT_ROTATED"
    status_code = 409


class RateLimitedError(RotationError):
    """Rotation cooldown has not elapsed."""
    code = "RATE_LIMITED"
    status_code = 429

    def __init__(self, message: str, retry_after: int = 0):
        super().__init__(message)
        self.retry_after = retry_after


class RemoteFailure(RotationError):
    """The remote password change did not complete."""
    code = "REMOTE_FAILURE"
    status_code = 502


class TransportFailure(RemoteFailure):
    """Remote unreachable, timed out, or answered with a redirect."""
    code = "TRANSPORT_FAILURE"


class ProtocolFailure(RemoteFailure):
    """Remote reachable but the reply was not a success."""
    code = "PROTOCOL_FAILURE"


class PersistenceFailure(RotationError):
    """Remote accepted the new secret but the store write failed.

    The remote side and the local record have diverged; an operator must
    reconcile them by hand.
    """
    code = "MANUAL_RECOVERY_REQUIRED"
    status_code = 500
