import asyncio
import logging
from datetime import datetime
from typing import Optional

from rotator.core.config import settings
from rotator.domain.errors import PersistenceFailure, RotationError
from rotator.domain.repositories import AccountRepository
from rotator.domain.secrets.rotation import RotationService, is_due, utcnow

logger = logging.getLogger(__name__)


async def tick(rotation_service: RotationService, accounts: AccountRepository, now: Optional[datetime] = None) -> None:
    """Rotate every account that is due at ``now``.

    Never raises. A failing account is logged and skipped; it is looked at
    again on the next tick.
    """
    now = now or utcnow()
    try:
        names = await accounts.list()
    except Exception as e:
        logger.error(f"periodic: failed to list accounts: {e}", exc_info=True)
        return

    rotated = 0
    failed = 0
    for name in names:
        try:
            account = await accounts.get(name)
        except Exception as e:
            failed += 1
            logger.error(f"periodic: failed to read account {name}: {e}", exc_info=True)
            continue

        if account is None or not is_due(account, now):
            logger.debug(f"periodic: account {name} not due")
            continue

        try:
            await rotation_service.rotate(name)
            rotated += 1
        except PersistenceFailure as e:
            failed += 1
            logger.critical(f"periodic: account {name} needs manual recovery: {e}")
        except RotationError as e:
            failed += 1
            logger.error(f"periodic: failed to rotate account {name}: code={e.code} error={e}")
        except Exception as e:
            failed += 1
            logger.error(f"periodic: unexpected error rotating account {name}: {e}", exc_info=True)

    logger.info(f"METRIC: periodic_rotated={rotated} periodic_failed={failed} scanned={len(names)}")


async def rotation_scheduler(shutdown_event: asyncio.Event):
    """Background worker that drives tick() on a fixed interval."""
    from rotator.dependencies import get_account_repository, get_rotation_service

    interval = settings.ROTATION_TICK_INTERVAL_SEC
    logger.info(f"Starting rotation scheduler (interval={interval}s)...")

    while not shutdown_event.is_set():
        try:
            await tick(get_rotation_service(), get_account_repository())
        except Exception as e:
            logger.error(f"Error in rotation scheduler loop: {e}", exc_info=True)

        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass

    logger.info("Rotation scheduler stopped.")
