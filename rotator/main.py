"""Device Password Rotator - Main Application."""
import asyncio
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rotator.api.admin import router as admin_router
from rotator.core.config import settings
from rotator.jobs.rotation_scheduler import rotation_scheduler
from rotator.logging_hardening import setup_logging
from rotator.routers import health

logger = logging.getLogger(__name__)

# Initialize logging redaction filters early
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    try:
        settings.validate_for_startup()
    except RuntimeError as e:
        logger.critical(f"CRITICAL STARTUP ERROR: {e}")
        sys.exit(1)

    shutdown_event = asyncio.Event()
    scheduler_task = None
    if settings.SCHEDULER_ENABLED:
        scheduler_task = asyncio.create_task(rotation_scheduler(shutdown_event))

    yield

    # Shutdown
    shutdown_event.set()
    logger.info("Initiating graceful shutdown...")
    if scheduler_task is not None:
        try:
            # An in-flight rotation is bounded by the SEMP timeout.
            await asyncio.wait_for(scheduler_task, timeout=settings.SEMP_TIMEOUT_SECONDS + 5)
        except asyncio.TimeoutError:
            logger.warning("Rotation scheduler did not stop in time; cancelling")
            scheduler_task.cancel()

    if settings.STORE_BACKEND.lower() == "redis":
        from rotator.adapters.redis.client import close_redis
        await close_redis()


app = FastAPI(
    title="Device Password Rotator",
    description="Rotates management-plane CLI passwords over SEMP and keeps the stored copy in sync",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(health.router)
app.include_router(admin_router.router, prefix="/v1/admin", tags=["admin"])
