import itertools
import logging
from pathlib import Path

import pytest

from overlaycheck.harness.core.expect import OverlayExpectation
from overlaycheck.snapshot.store import SnapshotLocation, SnapshotStore
from overlaycheck.utils.settings import settings

logger = logging.getLogger(__name__)


def pytest_addoption(parser):
    group = parser.getgroup("overlaycheck", "error overlay snapshots")
    group.addoption(
        "--update-overlay-snapshots",
        action="store_true",
        default=False,
        help="Rewrite stored overlay snapshots that no longer match",
    )
    group.addoption(
        "--overlay-build-mode",
        choices=["webpack", "turbopack"],
        default=None,
        help="Build mode whose expected overlay snapshots are compared",
    )


def pytest_configure(config):
    if config.getoption("--update-overlay-snapshots"):
        settings.UPDATE_SNAPSHOTS = True
    build_mode = config.getoption("--overlay-build-mode")
    if build_mode:
        settings.BUILD_MODE = build_mode
    logger.debug(
        f"Overlay snapshots: build mode {settings.BUILD_MODE}, update {settings.UPDATE_SNAPSHOTS}"
    )


@pytest.fixture
def build_mode() -> str:
    return settings.BUILD_MODE


@pytest.fixture
def overlay_store(request) -> SnapshotStore:
    return SnapshotStore.for_test_file(Path(request.node.path))


@pytest.fixture
def expect_overlay(request, overlay_store):
    """Build an ``OverlayExpectation`` whose snapshots are keyed by test name.

    Each assertion in a test gets the next call number, so reordering other
    tests or editing lines does not move the stored snapshots.
    """
    counter = itertools.count(1)
    test_file = Path(request.node.path)

    def _location() -> SnapshotLocation:
        return SnapshotLocation(
            test_file=test_file, call_site=f"{request.node.name} {next(counter)}"
        )

    def _expect(target) -> OverlayExpectation:
        return OverlayExpectation(
            target, store=overlay_store, location_factory=_location
        )

    return _expect
