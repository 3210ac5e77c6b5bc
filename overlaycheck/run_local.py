import argparse
import asyncio
import logging

from dotenv import find_dotenv, load_dotenv

from overlaycheck.harness.core.accessor import OverlayAccessor
from overlaycheck.harness.core.matcher import (
    to_display_collapsed_redbox,
    to_display_redbox,
)
from overlaycheck.harness.core.normalizer import capture_overlay_record
from overlaycheck.harness.core.presence import assert_openable, assert_visible
from overlaycheck.harness.core.runner import ScenarioRunner
from overlaycheck.harness.infra.browser import Browser
from overlaycheck.harness.infra.dev_server import DevServer
from overlaycheck.schema.overlay import NOT_FOUND_LITERALS
from overlaycheck.snapshot.format import format_snapshot
from overlaycheck.snapshot.store import SnapshotLocation, SnapshotStore
from overlaycheck.utils.settings import reload_settings

logger = logging.getLogger(__name__)


def load_env():
    """Load ``.env`` from the working directory into ``settings``."""
    load_dotenv(find_dotenv(usecwd=True))
    reload_settings()


async def capture_route(
    path: str,
    collapsed: bool = False,
    click: str | None = None,
    snapshot_file: str | None = None,
    base_url: str | None = None,
    browser: Browser | None = None,
    server: DevServer | None = None,
) -> bool:
    server = server or DevServer(base_url)
    browser = browser or Browser()
    store = SnapshotStore(snapshot_file) if snapshot_file else None
    location = (
        SnapshotLocation(test_file=store.path, call_site=path) if store else None
    )

    async def _open():
        await server.open(browser, path)

    async def _click():
        element = await browser.find_element(click)
        await browser.click(element)

    async def _capture():
        accessor = OverlayAccessor(browser)
        if collapsed:
            outcome = await assert_openable(accessor)
        else:
            outcome = await assert_visible(accessor)

        if outcome in NOT_FOUND_LITERALS:
            actual = NOT_FOUND_LITERALS[outcome]
        else:
            actual = (await capture_overlay_record(accessor)).to_snapshot()
        print(format_snapshot(actual))

    async def _match():
        matcher = to_display_collapsed_redbox if collapsed else to_display_redbox
        result = await matcher(browser, store=store, location=location)
        print(format_snapshot(result.actual))
        return result

    runner = ScenarioRunner(f"capture {path}")
    runner.add_step("open", _open)
    if click:
        runner.add_step("click", _click)
    if store is None:
        runner.add_step("capture", _capture)
    else:
        runner.add_step("match", _match)

    try:
        await server.wait_until_ready()
        await browser.start()
        outcome = await runner.run()
    except Exception as e:
        logger.error(f"Error capturing overlay for {path}: {e}")
        raise e
    finally:
        await browser.stop()

    if browser.page_errors:
        print("Uncaught page errors:")
        for error in browser.page_errors:
            print(f"  {error}")

    failed = outcome.failed_step
    if failed is not None:
        print(failed.result.message if failed.result else failed.error)
    return outcome.passed


def main():
    parser = argparse.ArgumentParser(
        description="Capture the error overlay shown for a dev server route"
    )
    parser.add_argument("path", help="Route to open, e.g. /browser/event")
    parser.add_argument(
        "--collapsed",
        action="store_true",
        help="The overlay starts collapsed behind its toast",
    )
    parser.add_argument("--click", help="CSS selector to click after navigating")
    parser.add_argument(
        "--snapshot-file", help="Record into / compare against this JSON store"
    )
    parser.add_argument("--base-url", help="Dev server URL (default BASE_URL)")
    args = parser.parse_args()

    load_env()
    passed = asyncio.run(
        capture_route(
            args.path, args.collapsed, args.click, args.snapshot_file, args.base_url
        )
    )
    raise SystemExit(0 if passed else 1)


if __name__ == "__main__":
    main()
