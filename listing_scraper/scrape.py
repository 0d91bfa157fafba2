"""One /scrape request, end to end."""

import structlog

from listing_scraper import config
from listing_scraper.behavior import simulate_human_behavior
from listing_scraper.browser import BrowserManager, browser_manager
from listing_scraper.extract import extract_listing_from_page
from listing_scraper.models import ScrapedListing, ScrapeRequest, ScrapeResponse
from listing_scraper.session import build_context

logger = structlog.get_logger(__name__)


class InvalidScrapeRequest(ValueError):
    """Request rejected before any browser work."""


def validate_scrape_request(request: ScrapeRequest) -> None:
    if not config.is_target_url(request.url):
        raise InvalidScrapeRequest("Invalid BizBuySell URL")
    if not request.dealId:
        raise InvalidScrapeRequest("Deal ID is required")


async def scrape_listing(request: ScrapeRequest, manager: BrowserManager = browser_manager) -> ScrapeResponse:
    """
    Scrape one listing page.

    Raises InvalidScrapeRequest for bad input. Anything else that goes wrong
    (navigation timeout, evaluation failure) propagates to the caller; there
    is no retry. The per-request context is always closed.
    """
    validate_scrape_request(request)

    logger.info("Scraping BizBuySell listing", url=request.url, deal_id=request.dealId)
    browser = await manager.get_browser()

    ctx = await build_context(browser)
    try:
        page = await ctx.new_page()

        await page.goto(
            request.url,
            wait_until="domcontentloaded",
            timeout=config.NAVIGATION_TIMEOUT_MS,
            referer=config.REFERER,
        )
        await simulate_human_behavior(page)

        listing = await extract_listing_from_page(page)
    finally:
        try:
            await ctx.close()
        except Exception as e:
            logger.error("Error closing context", error=str(e))

    logger.info(
        "Extraction completed",
        url=request.url,
        fields_extracted=list(listing.fields_extracted),
        parsing_confidence=listing.parsing_confidence,
    )

    data = ScrapedListing.with_source(listing, source_type=config.SOURCE_TYPE, source_url=request.url)
    return ScrapeResponse(
        data=data,
        fields_extracted=data.fields_extracted,
        parsing_confidence=data.parsing_confidence,
    )
