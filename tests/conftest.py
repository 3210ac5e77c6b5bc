"""Shared fixtures: an in-memory stand-in for the browser driver."""

import pytest

from overlaycheck.exceptions import ExtractionNotFound
from overlaycheck.harness.core.accessor import OverlayAccessor, OverlaySelectors

SELECTORS = OverlaySelectors(
    dialog="[data-nextjs-dialog]",
    toast="[data-nextjs-toast]",
    description="#nextjs__container_errors_desc",
    source="[data-nextjs-codeframe]",
    terminal="[data-nextjs-terminal]",
    stack_frame="[data-nextjs-call-stack-frame]",
    count="[data-nextjs-dialog-error-count]",
    title="#nextjs__container_errors_label",
)

CONSOLE_ERROR_SOURCE = (
    "app/browser/event/page.js (7:17) @ onClick\n"
    ">  7 |         console.error('trigger an console <%s>', 'error')   \n"
    "     |                 ^"
)


class FakeElement:
    def __init__(self, selector: str, text: str):
        self.selector = selector
        self.text = text


class FakeBrowser:
    """Renders a dict of selector -> texts.

    ``collapsed`` regions stay hidden until the toast is clicked, ``delay``
    lookups of the dialog fail before it shows up, and ``broken`` selectors
    raise when their text is read.
    """

    def __init__(
        self,
        elements: dict[str, list[str]] | None = None,
        collapsed: dict[str, list[str]] | None = None,
        delay: int = 0,
        broken: dict[str, Exception] | None = None,
        click_error: Exception | None = None,
    ):
        self.elements = dict(elements or {})
        self.collapsed = dict(collapsed or {})
        self.delay = delay
        self.broken = dict(broken or {})
        self.click_error = click_error
        self.clicks: list[str] = []
        self.lookups: list[str] = []

    async def find_element(self, selector: str) -> FakeElement:
        self.lookups.append(selector)
        if selector == SELECTORS.dialog and self.delay > 0:
            self.delay -= 1
            raise ExtractionNotFound("not yet", selector=selector)
        texts = self.elements.get(selector)
        if not texts:
            raise ExtractionNotFound(f"No element matches {selector}", selector=selector)
        return FakeElement(selector, texts[0])

    async def find_elements(self, selector: str) -> list[FakeElement]:
        return [FakeElement(selector, text) for text in self.elements.get(selector, [])]

    async def get_text(self, element: FakeElement) -> str:
        if element.selector in self.broken:
            raise self.broken[element.selector]
        return element.text

    async def click(self, element: FakeElement):
        self.clicks.append(element.selector)
        if self.click_error is not None:
            raise self.click_error
        if element.selector == SELECTORS.toast:
            self.elements.pop(SELECTORS.toast, None)
            self.elements.update(self.collapsed)
            self.collapsed = {}


def console_error_overlay() -> dict[str, list[str]]:
    return {
        SELECTORS.dialog: [""],
        SELECTORS.description: ["trigger an console <error>\n"],
        SELECTORS.source: [CONSOLE_ERROR_SOURCE],
        SELECTORS.stack_frame: [
            "button\n<anonymous> (0:0)",
            "button   app/browser/event/page.js (5:6)",
        ],
        SELECTORS.count: ["1"],
        SELECTORS.title: ["Console Error"],
    }


def compile_error_overlay() -> dict[str, list[str]]:
    return {
        SELECTORS.dialog: [""],
        SELECTORS.description: ["Failed to compile"],
        SELECTORS.terminal: [
            "./app/page.js\nError:   x Unexpected token `div`. Expected jsx identifier\n"
        ],
    }


CONSOLE_ERROR_SNAPSHOT = {
    "description": "trigger an console <error>",
    "source": (
        "app/browser/event/page.js (7:17) @ onClick\n"
        ">  7 |         console.error('trigger an console <%s>', 'error')\n"
        "     |                 ^"
    ),
    "stack": [
        "button <anonymous> (0:0)",
        "button app/browser/event/page.js (5:6)",
    ],
    "count": 1,
    "title": "Console Error",
}


def pytest_addoption(parser):
    parser.addoption(
        "--run-browser",
        action="store_true",
        default=False,
        help="Run tests that launch a real Chromium",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-browser"):
        return

    skip_browser = pytest.mark.skip(reason="Need --run-browser option to run")
    for item in items:
        if "browser" in item.keywords:
            item.add_marker(skip_browser)


@pytest.fixture
def make_accessor():
    def _make(browser: FakeBrowser) -> OverlayAccessor:
        return OverlayAccessor(browser, SELECTORS)

    return _make
