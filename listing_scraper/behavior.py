# Scripted reading/mouse/scroll choreography run before extraction
import asyncio
import random

import structlog
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from listing_scraper import config

logger = structlog.get_logger(__name__)

MOUSE_PATH = ((100, 100, 0.5), (300, 200, 0.3), (500, 400, 0.2))
SCROLL_OFFSET = 200
CONTENT_SELECTOR = 'h1, .listing-title, [data-cy="listing-title"], .business-title'


async def _human_delay(min_seconds=1, max_seconds=3):
    """Add human-like delays"""
    await asyncio.sleep(random.uniform(min_seconds, max_seconds))


async def simulate_human_behavior(page, content_timeout_ms: int = config.CONTENT_WAIT_TIMEOUT_MS):
    """
    Pretend to read the page, then wait for the listing to render.

    Strictly sequential. A missing listing selector is logged and tolerated;
    extraction then runs against whatever DOM is there.
    """
    logger.debug("Simulating page reading time")
    await _human_delay(3, 6)

    for x, y, pause in MOUSE_PATH:
        await page.mouse.move(x, y)
        await asyncio.sleep(pause)

    await page.evaluate(f"() => window.scrollTo(0, {SCROLL_OFFSET})")
    await asyncio.sleep(1.0)
    await page.evaluate("() => window.scrollTo(0, 0)")
    await asyncio.sleep(1.5)

    try:
        await page.wait_for_selector(CONTENT_SELECTOR, timeout=content_timeout_ms)
    except PlaywrightTimeoutError as e:
        logger.warning("Listing selector not found, continuing with current page state", error=str(e))

    await asyncio.sleep(3.0)
