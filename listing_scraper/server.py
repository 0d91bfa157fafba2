"""FastAPI application: /health, /scrape and /classify-industry."""
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from listing_scraper import config
from listing_scraper.browser import BrowserManager, browser_manager
from listing_scraper.classify import get_classifier
from listing_scraper.models import ClassifyRequest, HealthStatus, ScrapeRequest, ScrapeResponse
from listing_scraper.scrape import InvalidScrapeRequest, scrape_listing

logger = structlog.get_logger(__name__)

router = APIRouter()


# ---- Dependencies -----------------------------------------------------------

def get_browser_manager() -> BrowserManager:
    return browser_manager


def get_industry_classifier():
    return get_classifier()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


# ---- Routes -------------------------------------------------------------------

@router.get("/health", response_model=HealthStatus)
async def health_check(manager: BrowserManager = Depends(get_browser_manager)):
    return HealthStatus(browser=manager.is_connected())


@router.post("/scrape", response_model=ScrapeResponse, response_model_exclude_none=True)
async def scrape(body: ScrapeRequest, manager: BrowserManager = Depends(get_browser_manager)):
    try:
        return await scrape_listing(body, manager)
    except InvalidScrapeRequest as exc:
        logger.info("Rejected scrape request", error=str(exc))
        return _error(400, str(exc))
    except Exception as exc:
        logger.exception("Scraping error", url=body.url)
        return _error(500, str(exc) or "Failed to scrape BizBuySell listing")


@router.post("/classify-industry")
async def classify_industry(body: ClassifyRequest, classifier=Depends(get_industry_classifier)):
    if not body.description:
        return _error(400, "Description is required")

    result = await classifier.classify(body.description)
    return {"success": True, "industry": result.industry, "confidence": result.confidence}


# ---- App ------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("BizBuySell scraper service starting", port=config.PORT)
    yield
    logger.info("Shutting down, closing browser")
    await browser_manager.close()


def create_app() -> FastAPI:
    app = FastAPI(
        title="BizBuySell Listing Scraper",
        description="Scrapes a single BizBuySell listing into structured fields.",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.FRONTEND_URL],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app


app = create_app()
