import sys, asyncio
from pathlib import Path

import structlog
import uvicorn

from listing_scraper import config
from listing_scraper.browser import BrowserManager
from listing_scraper.extract import extract_listing_from_html
from listing_scraper.models import ScrapeRequest
from listing_scraper.scrape import InvalidScrapeRequest, scrape_listing

logger = structlog.get_logger(__name__)

USAGE = (
    "usage: python -m listing_scraper.main "
    "[--scrape-once URL DEAL_ID | --extract-html FILE]"
)

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    config.configure_logging()

    if argv and argv[0] == "--scrape-once":
        if len(argv) != 3:
            print(USAGE)
            return 2
        return asyncio.run(_once(argv[1], argv[2]))

    if argv and argv[0] == "--extract-html":
        if len(argv) != 2:
            print(USAGE)
            return 2
        listing = extract_listing_from_html(Path(argv[1]).read_text(encoding="utf-8"))
        print(listing.model_dump_json(indent=2, exclude_none=True))
        return 0

    if argv:
        print(USAGE)
        return 2

    logger.info("Starting HTTP server", host=config.HOST, port=config.PORT)
    uvicorn.run("listing_scraper.server:app", host=config.HOST, port=config.PORT)
    return 0

async def _once(url: str, deal_id: str):
    print(f"[once] flags DEBUG={config.DEBUG} HEADFUL={config.HEADFUL}")
    manager = BrowserManager()
    try:
        response = await scrape_listing(ScrapeRequest(url=url, dealId=deal_id), manager)
    except InvalidScrapeRequest as e:
        print("scrape-once:", e)
        return 2
    finally:
        await manager.close()
    print(response.model_dump_json(indent=2, exclude_none=True))
    return 0

if __name__ == "__main__":
    sys.exit(main())
