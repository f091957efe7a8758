from fastapi import APIRouter, Depends, HTTPException
import logging

from rotator.dependencies import get_store
from rotator.domain.interfaces import KeyValueStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health/live")
async def liveness():
    """Liveness probe: Service is running."""
    return {"status": "ok", "checks": {"api": "ok"}}


@router.get("/health/ready")
async def readiness(store: KeyValueStore = Depends(get_store)):
    """Readiness probe: store reachable."""
    health = {"status": "ok", "checks": {}}

    try:
        await store.list("")
        health["checks"]["store"] = "ok"
    except Exception as e:
        logger.error(f"Health check failed (store): {e}")
        health["checks"]["store"] = "failed"
        health["status"] = "failed"

    if health["status"] == "failed":
        raise HTTPException(status_code=503, detail=health)
    return health
