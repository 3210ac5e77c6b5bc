import asyncio
import logging
import time
from urllib.parse import urljoin

import httpx

from overlaycheck.exceptions import DevServerNotReady
from overlaycheck.harness.infra.browser import Browser
from overlaycheck.utils.settings import settings

logger = logging.getLogger(__name__)


class DevServer:
    """The application under test, reached over HTTP at ``base_url``."""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.BASE_URL
        self.transport = transport

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))

    async def wait_until_ready(
        self, timeout_seconds: float | None = None, interval_seconds: float = 0.5
    ):
        """Poll the server until it answers any HTTP response.

        Dev servers compile on first request, so 4xx/5xx still count as up.
        """
        if timeout_seconds is None:
            timeout_seconds = settings.SERVER_READY_TIMEOUT_S

        deadline = time.monotonic() + timeout_seconds
        last_error = None
        async with httpx.AsyncClient(transport=self.transport) as client:
            while True:
                # a hanging request must not outlive the deadline
                remaining = max(deadline - time.monotonic(), 0.01)
                try:
                    response = await client.get(self.base_url, timeout=remaining)
                    logger.debug(
                        f"Dev server at {self.base_url} answered {response.status_code}"
                    )
                    return response.status_code
                except httpx.HTTPError as e:
                    last_error = e

                if time.monotonic() >= deadline:
                    break
                await asyncio.sleep(interval_seconds)

        logger.error(f"Dev server at {self.base_url} is not ready: {last_error}")
        raise DevServerNotReady(
            message=f"Dev server at {self.base_url} did not answer within {timeout_seconds}s",
            url=self.base_url,
            original_error=last_error,
        )

    async def open(self, browser: Browser, path: str) -> Browser:
        await browser.go_to_url(self.url_for(path))
        return browser
