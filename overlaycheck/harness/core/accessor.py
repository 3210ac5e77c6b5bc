import logging

from pydantic import BaseModel

from overlaycheck.exceptions import ExtractionNotFound, OpenFailed
from overlaycheck.harness.infra.browser import Browser
from overlaycheck.utils.settings import settings

logger = logging.getLogger(__name__)


class OverlaySelectors(BaseModel):
    dialog: str
    toast: str
    description: str
    source: str
    terminal: str
    stack_frame: str
    count: str
    title: str

    @classmethod
    def from_settings(cls) -> "OverlaySelectors":
        return cls(
            dialog=settings.SELECTOR_DIALOG,
            toast=settings.SELECTOR_TOAST,
            description=settings.SELECTOR_DESCRIPTION,
            source=settings.SELECTOR_SOURCE,
            terminal=settings.SELECTOR_TERMINAL,
            stack_frame=settings.SELECTOR_STACK_FRAME,
            count=settings.SELECTOR_COUNT,
            title=settings.SELECTOR_TITLE,
        )


class OverlayAccessor:
    """Reads the error overlay out of the current page.

    Every read raises ``ExtractionNotFound`` when its region is not rendered.
    Nothing here waits or retries.
    """

    def __init__(self, browser: Browser, selectors: OverlaySelectors | None = None):
        self.browser = browser
        self.selectors = selectors or OverlaySelectors.from_settings()

    async def _exists(self, selector: str) -> bool:
        try:
            await self.browser.find_element(selector)
        except ExtractionNotFound:
            return False
        return True

    async def _text(self, selector: str) -> str:
        element = await self.browser.find_element(selector)
        return await self.browser.get_text(element)

    async def overlay_is_present(self) -> bool:
        return await self._exists(self.selectors.dialog)

    async def has_error_toast(self) -> bool:
        return await self._exists(self.selectors.toast)

    async def extract_description(self) -> str:
        return await self._text(self.selectors.description)

    async def extract_source(self) -> str | None:
        if not await self.overlay_is_present():
            raise ExtractionNotFound("No overlay is rendered", self.selectors.dialog)

        # build errors render a terminal instead of a code frame
        for selector in (self.selectors.source, self.selectors.terminal):
            try:
                return await self._text(selector)
            except ExtractionNotFound:
                continue
        return None

    async def extract_stack(self) -> list[str]:
        if not await self.overlay_is_present():
            raise ExtractionNotFound("No overlay is rendered", self.selectors.dialog)

        frames = await self.browser.find_elements(self.selectors.stack_frame)
        return [await self.browser.get_text(frame) for frame in frames]

    async def extract_count(self) -> str:
        return await self._text(self.selectors.count)

    async def extract_title(self) -> str:
        return await self._text(self.selectors.title)

    async def open_collapsed_overlay(self):
        if await self.overlay_is_present():
            raise OpenFailed("Overlay is already open, it was not collapsed")

        try:
            toast = await self.browser.find_element(self.selectors.toast)
        except ExtractionNotFound as e:
            raise OpenFailed("No collapsed overlay to open", original_error=e)

        try:
            await self.browser.click(toast)
        except Exception as e:
            raise OpenFailed(
                f"Could not open collapsed overlay: {e}", original_error=e
            )
        logger.debug("Clicked error toast to open the overlay")
