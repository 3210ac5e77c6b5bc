import logging
from typing import Any, Protocol

from overlaycheck.harness.core.accessor import OverlayAccessor
from overlaycheck.harness.core.normalizer import capture_overlay_record
from overlaycheck.harness.core.presence import assert_openable, assert_visible
from overlaycheck.harness.infra.browser import Browser
from overlaycheck.schema.overlay import (
    MISSING,
    NOT_FOUND_LITERALS,
    ExpectedVariants,
    OverlayRecord,
    PresenceOutcome,
)
from overlaycheck.schema.result import MatchResult
from overlaycheck.snapshot.compare import compare_snapshot
from overlaycheck.snapshot.store import SnapshotLocation, SnapshotStore
from overlaycheck.utils.settings import settings

logger = logging.getLogger(__name__)


async def match_overlay(
    outcome: PresenceOutcome,
    record: OverlayRecord | None,
    expected: Any = MISSING,
    *,
    store: SnapshotStore | None = None,
    location: SnapshotLocation | None = None,
) -> MatchResult:
    """Compare what the overlay showed against the expected snapshot.

    Leaving out ``expected`` hands the comparison to the snapshot store, which
    records the actual value the first time a location is seen. Passing any
    value, ``None`` included, compares against that value.
    """
    if outcome in NOT_FOUND_LITERALS:
        actual = NOT_FOUND_LITERALS[outcome]
    elif record is None:
        raise ValueError(f"Outcome {outcome.value} requires a captured overlay record")
    else:
        actual = record.to_snapshot()

    if isinstance(expected, ExpectedVariants):
        build_mode = location.build_mode if location else settings.BUILD_MODE
        expected = expected.select(build_mode)

    if expected is MISSING:
        if location is None:
            location = SnapshotLocation.from_caller()
        if store is None:
            store = SnapshotStore.for_test_file(location.test_file)
        result = await store.compare_or_record(actual, location)
    else:
        result = compare_snapshot(
            actual, expected, location=str(location) if location else None
        )

    if not result.passed:
        logger.debug(result.message)
    return result


def _as_accessor(target: Browser | OverlayAccessor) -> OverlayAccessor:
    if isinstance(target, OverlayAccessor):
        return target
    return OverlayAccessor(target)


async def to_display_redbox(
    target: Browser | OverlayAccessor,
    expected: Any = MISSING,
    *,
    store: SnapshotStore | None = None,
    location: SnapshotLocation | None = None,
    timeout_ms: float | None = None,
) -> MatchResult:
    """Match an overlay that pops up by itself.

    Use ``to_display_collapsed_redbox`` when the overlay sits behind a toast.
    """
    accessor = _as_accessor(target)
    outcome = await assert_visible(accessor, timeout_ms=timeout_ms)
    record = None
    if outcome is PresenceOutcome.VISIBLE:
        record = await capture_overlay_record(accessor)
    return await match_overlay(
        outcome, record, expected, store=store, location=location
    )


async def to_display_collapsed_redbox(
    target: Browser | OverlayAccessor,
    expected: Any = MISSING,
    *,
    store: SnapshotStore | None = None,
    location: SnapshotLocation | None = None,
    timeout_ms: float | None = None,
    toast_timeout_ms: float | None = None,
) -> MatchResult:
    """Open an overlay collapsed behind its toast, then match it."""
    accessor = _as_accessor(target)
    outcome = await assert_openable(
        accessor, timeout_ms=timeout_ms, toast_timeout_ms=toast_timeout_ms
    )
    record = None
    if outcome is PresenceOutcome.OPENED:
        record = await capture_overlay_record(accessor)
    return await match_overlay(
        outcome, record, expected, store=store, location=location
    )


class Matcher(Protocol):
    name: str

    async def __call__(
        self,
        target: Browser | OverlayAccessor,
        expected: Any = MISSING,
        *,
        store: SnapshotStore | None = None,
        location: SnapshotLocation | None = None,
    ) -> MatchResult: ...


class DisplayRedbox:
    name = "to_display_redbox"

    def __init__(self, timeout_ms: float | None = None):
        self.timeout_ms = timeout_ms

    async def __call__(self, target, expected=MISSING, *, store=None, location=None):
        return await to_display_redbox(
            target,
            expected,
            store=store,
            location=location,
            timeout_ms=self.timeout_ms,
        )


class DisplayCollapsedRedbox:
    name = "to_display_collapsed_redbox"

    def __init__(
        self, timeout_ms: float | None = None, toast_timeout_ms: float | None = None
    ):
        self.timeout_ms = timeout_ms
        self.toast_timeout_ms = toast_timeout_ms

    async def __call__(self, target, expected=MISSING, *, store=None, location=None):
        return await to_display_collapsed_redbox(
            target,
            expected,
            store=store,
            location=location,
            timeout_ms=self.timeout_ms,
            toast_timeout_ms=self.toast_timeout_ms,
        )
