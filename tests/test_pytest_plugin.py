import pytest
from conftest import FakeBrowser

from overlaycheck.harness.core.expect import OverlayExpectation
from overlaycheck.snapshot.store import SnapshotStore
from overlaycheck.utils.settings import settings


def test_build_mode_fixture(build_mode):
    assert build_mode == settings.BUILD_MODE


def test_overlay_store_is_beside_this_file(overlay_store, request):
    assert overlay_store is SnapshotStore.for_test_file(request.node.path)
    assert overlay_store.path.name == "test_pytest_plugin.json"


def test_expect_overlay_numbers_call_sites(expect_overlay):
    expectation = expect_overlay(FakeBrowser())

    first = expectation.location_factory()
    second = expectation.location_factory()

    assert isinstance(expectation, OverlayExpectation)
    assert first.call_site == "test_expect_overlay_numbers_call_sites 1"
    assert second.call_site == "test_expect_overlay_numbers_call_sites 2"


@pytest.mark.asyncio
async def test_expect_overlay_with_literal(expect_overlay):
    expectation = expect_overlay(FakeBrowser())
    expectation.display.timeout_ms = 20

    result = await expectation.to_display_redbox("<no redbox found>")

    assert result.passed
    assert result.location.startswith("test_pytest_plugin.py::")


def test_options_registered_by_entry_point(request):
    assert request.config.getoption("--overlay-build-mode") in (None, "webpack", "turbopack")
    assert request.config.getoption("--update-overlay-snapshots") in (True, False)
