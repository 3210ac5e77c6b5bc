import asyncio
import logging

from overlaycheck.exceptions import OpenFailed, UnexpectedOverlay
from overlaycheck.harness.core.accessor import OverlayAccessor
from overlaycheck.harness.core.normalizer import capture_overlay_record
from overlaycheck.harness.core.retry import poll_until
from overlaycheck.schema.overlay import PresenceOutcome
from overlaycheck.snapshot.format import format_snapshot
from overlaycheck.utils.settings import settings

logger = logging.getLogger(__name__)


async def assert_visible(
    accessor: OverlayAccessor,
    timeout_ms: float | None = None,
    interval_ms: float | None = None,
) -> PresenceOutcome:
    if timeout_ms is None:
        timeout_ms = settings.OVERLAY_TIMEOUT_MS

    if await poll_until(accessor.overlay_is_present, timeout_ms, interval_ms):
        logger.debug("Overlay is visible")
        return PresenceOutcome.VISIBLE

    logger.debug(f"No overlay appeared within {timeout_ms}ms")
    return PresenceOutcome.NOT_FOUND


async def assert_openable(
    accessor: OverlayAccessor,
    timeout_ms: float | None = None,
    toast_timeout_ms: float | None = None,
    interval_ms: float | None = None,
) -> PresenceOutcome:
    if timeout_ms is None:
        timeout_ms = settings.OVERLAY_TIMEOUT_MS
    if toast_timeout_ms is None:
        toast_timeout_ms = settings.TOAST_TIMEOUT_MS

    async def _toast_or_overlay() -> bool:
        return await accessor.has_error_toast() or await accessor.overlay_is_present()

    # give the toast a chance to render; the open attempt decides the outcome
    await poll_until(_toast_or_overlay, toast_timeout_ms, interval_ms)

    try:
        await accessor.open_collapsed_overlay()
    except OpenFailed as e:
        logger.debug(f"Overlay is not openable: {e.message}")
        return PresenceOutcome.NOT_OPENABLE

    if await poll_until(accessor.overlay_is_present, timeout_ms, interval_ms):
        logger.debug("Collapsed overlay opened")
        return PresenceOutcome.OPENED

    logger.debug(f"Overlay did not open within {timeout_ms}ms")
    return PresenceOutcome.NOT_OPENABLE


async def assert_no_overlay(accessor: OverlayAccessor, settle_ms: float | None = None):
    if settle_ms is None:
        settle_ms = settings.NO_OVERLAY_SETTLE_MS
    await asyncio.sleep(settle_ms / 1000)

    if not await accessor.overlay_is_present():
        return

    snapshot = (await capture_overlay_record(accessor)).to_snapshot()
    logger.error(f"Unexpected overlay: {snapshot['description']}")
    raise UnexpectedOverlay(
        message=f"Expected no overlay, but one is open:\n{format_snapshot(snapshot)}",
        snapshot=snapshot,
    )
