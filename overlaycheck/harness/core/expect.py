import logging
from typing import Any, Callable

from overlaycheck.harness.core.accessor import OverlayAccessor
from overlaycheck.harness.core.matcher import (
    DisplayCollapsedRedbox,
    DisplayRedbox,
    Matcher,
)
from overlaycheck.harness.core.presence import assert_no_overlay
from overlaycheck.harness.core.runner import raise_for_result
from overlaycheck.harness.infra.browser import Browser
from overlaycheck.schema.overlay import MISSING
from overlaycheck.schema.result import MatchResult
from overlaycheck.snapshot.store import SnapshotLocation, SnapshotStore

logger = logging.getLogger(__name__)


class OverlayExpectation:
    """``expect``-style assertions that raise on the first mismatch."""

    def __init__(
        self,
        target: Browser | OverlayAccessor,
        store: SnapshotStore | None = None,
        location_factory: Callable[[], SnapshotLocation] | None = None,
        display: Matcher | None = None,
        display_collapsed: Matcher | None = None,
    ):
        self.accessor = (
            target if isinstance(target, OverlayAccessor) else OverlayAccessor(target)
        )
        self.store = store
        self.location_factory = location_factory
        self.display = display or DisplayRedbox()
        self.display_collapsed = display_collapsed or DisplayCollapsedRedbox()

    async def _run(self, matcher: Matcher, expected: Any) -> MatchResult:
        # the factory is consumed on every call so call-site ids stay stable
        location = self.location_factory() if self.location_factory else None
        result = await matcher(
            self.accessor, expected, store=self.store, location=location
        )
        return raise_for_result(result)

    async def to_display_redbox(self, expected: Any = MISSING) -> MatchResult:
        return await self._run(self.display, expected)

    async def to_display_collapsed_redbox(self, expected: Any = MISSING) -> MatchResult:
        return await self._run(self.display_collapsed, expected)

    async def not_to_display_redbox(self, settle_ms: float | None = None):
        await assert_no_overlay(self.accessor, settle_ms=settle_ms)


def expect_overlay(target: Browser | OverlayAccessor, **kwargs) -> OverlayExpectation:
    return OverlayExpectation(target, **kwargs)
