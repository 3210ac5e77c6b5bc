import logging

from playwright.async_api import Locator, Page, async_playwright

from overlaycheck.exceptions import ExtractionNotFound
from overlaycheck.utils.settings import settings

logger = logging.getLogger(__name__)


class Browser:
    def __init__(
        self,
        headless: bool | None = None,
        channel: str | None = None,
        click_timeout_seconds: float = 5.0,
    ):
        self.headless = settings.HEADLESS if headless is None else headless
        self.channel = channel or settings.BROWSER_CHANNEL
        self.click_timeout_seconds = click_timeout_seconds

        self.playwright = None
        self.browser = None
        self.context = None
        self.page = None

        self.page_errors: list[str] = []

    async def start(self):
        logger.debug("Starting browser")
        try:
            if self.playwright is not None:
                await self.playwright.stop()

            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                channel=self.channel,
                headless=self.headless,
            )

            self.context = await self.browser.new_context()
            self.page = await self.context.new_page()
            self.page.on("pageerror", self._on_page_error)

            logger.debug("Browser started successfully")

        except Exception as e:
            logger.error(f"Error starting playwright: {e}")
            raise e

    async def stop(self):
        logger.debug("Stopping browser")
        if self.context is not None:
            logger.debug("Stopping context")
            await self.context.close()
            self.context = None

        if self.browser is not None:
            await self.browser.close()
            self.browser = None

        if self.playwright is not None:
            logger.debug("Stopping playwright")
            await self.playwright.stop()
            self.playwright = None
        self.page = None
        logger.debug("Browser stopped")

    async def get_current_page(self) -> Page | None:
        if self.context is None:
            return None
        pages = self.context.pages
        if len(pages) == 0:
            self.page = await self.context.new_page()
            self.page.on("pageerror", self._on_page_error)
        else:
            self.page = pages[-1]

        return self.page

    async def go_to_url(self, url: str):
        page = await self.get_current_page()
        if page is None:
            raise RuntimeError("Browser is not started")
        logger.debug(f"Navigating to {url}")
        await page.goto(url)

    async def set_content(self, html: str):
        page = await self.get_current_page()
        if page is None:
            raise RuntimeError("Browser is not started")
        await page.set_content(html)

    async def find_element(self, selector: str) -> Locator:
        page = await self.get_current_page()
        if page is None:
            raise ExtractionNotFound("No page is open", selector=selector)

        # CSS locators pierce the overlay's open shadow root
        locator = page.locator(selector)
        if await locator.count() == 0:
            raise ExtractionNotFound(f"No element matches {selector}", selector=selector)
        return locator.first

    async def find_elements(self, selector: str) -> list[Locator]:
        page = await self.get_current_page()
        if page is None:
            raise ExtractionNotFound("No page is open", selector=selector)
        return await page.locator(selector).all()

    async def get_text(self, element: Locator) -> str:
        return await element.inner_text()

    async def click(self, element: Locator):
        await element.click(
            no_wait_after=True, timeout=self.click_timeout_seconds * 1000
        )

    def _on_page_error(self, error):
        logger.debug(f"Uncaught page error: {error}")
        self.page_errors.append(str(error))
