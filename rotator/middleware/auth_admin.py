"""Admin API authentication."""
import hmac
from typing import Optional

from fastapi import Header, HTTPException

from rotator.core.config import settings


async def require_admin(authorization: Optional[str] = Header(None)) -> str:
    """Return the admin principal, or raise 401.

    In dev mode with no ADMIN_TOKEN configured every request is admitted.
    """
    token = settings.ADMIN_TOKEN
    if not token:
        if settings.is_dev:
            return "admin"
        raise HTTPException(
            status_code=401,
            detail={"error": {"code": "AUTH_INVALID", "message": "Admin authentication is not configured"}}
        )

    if authorization and authorization.startswith("Bearer "):
        presented = authorization[7:]
        if hmac.compare_digest(presented.encode("utf-8"), token.encode("utf-8")):
            return "admin"

    raise HTTPException(
        status_code=401,
        detail={"error": {"code": "AUTH_INVALID", "message": "Missing or invalid authentication"}}
    )
