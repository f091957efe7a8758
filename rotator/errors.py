from fastapi import HTTPException
from typing import Optional, Dict, Any

from rotator.domain.errors import RateLimitedError, RotationError


def raise_rotator_error(
    code: str,
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> None:
    """Raise a standardized HTTPException.

    Args:
        code: Error code (NOT_FOUND, RATE_LIMITED, etc.)
        status_code: HTTP Status Code (404, 429, etc.)
        message: Human readable message
        details: Optional extra details
    """
    error_body: Dict[str, Any] = {
        "code": code,
        "message": message
    }
    if details:
        error_body["details"] = details

    raise HTTPException(status_code=status_code, detail={"error": error_body}, headers=headers)


def raise_from_domain(exc: RotationError) -> None:
    """Translate a domain error; ``exc.detail`` never reaches the caller."""
    headers = None
    if isinstance(exc, RateLimitedError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}
    raise_rotator_error(exc.code, exc.status_code, exc.message, headers=headers)
