# Process-wide Chromium handle: launched lazily, relaunched when dead, closed once
import asyncio

import structlog
from playwright.async_api import async_playwright

from listing_scraper import config

logger = structlog.get_logger(__name__)


class BrowserManager:
    """Owns the Playwright driver and the one shared browser process."""

    def __init__(self, launcher=async_playwright):
        self._launcher = launcher
        self.playwright = None
        self.browser = None
        self._lock = asyncio.Lock()

    def is_connected(self) -> bool | None:
        """None until a browser has been launched."""
        if self.browser is None:
            return None
        return self.browser.is_connected()

    async def get_browser(self):
        """Return a connected browser, launching a new one if needed."""
        if self.browser is not None and self.browser.is_connected():
            return self.browser

        async with self._lock:
            # Another request may have launched while we waited
            if self.browser is not None and self.browser.is_connected():
                return self.browser

            logger.info("Launching new browser instance", headless=not config.HEADFUL)
            if self.playwright is None:
                self.playwright = await self._launcher().start()
            self.browser = await self.playwright.chromium.launch(
                headless=not config.HEADFUL,
                args=config.BROWSER_ARGS,
            )
            return self.browser

    async def close(self):
        """Clean up resources"""
        browser, self.browser = self.browser, None
        playwright, self.playwright = self.playwright, None

        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.error("Error closing browser", error=str(e))
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.error("Error stopping playwright", error=str(e))


# Global instance for easy access
browser_manager = BrowserManager()
