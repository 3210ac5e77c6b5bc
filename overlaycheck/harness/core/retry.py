import asyncio
import logging
import time
from typing import Awaitable, Callable

from overlaycheck.utils.settings import settings

logger = logging.getLogger(__name__)


async def poll_until(
    predicate: Callable[[], Awaitable[bool]],
    timeout_ms: float,
    interval_ms: float | None = None,
) -> bool:
    """Re-check ``predicate`` until it holds or ``timeout_ms`` elapses.

    The predicate is always checked at least once. Exceptions count as a
    failed check.
    """
    if interval_ms is None:
        interval_ms = settings.POLL_INTERVAL_MS

    deadline = time.monotonic() + timeout_ms / 1000
    tries = 0
    while True:
        tries += 1
        try:
            if await predicate():
                return True
        except Exception as e:
            logger.debug(f"Poll check {tries} raised: {e}")

        if time.monotonic() >= deadline:
            logger.debug(f"Gave up polling after {tries} tries ({timeout_ms}ms)")
            return False
        await asyncio.sleep(interval_ms / 1000)
