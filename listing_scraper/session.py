# Browser context that looks like a regular desktop Chrome arriving from a Google search
import random
import string

import structlog
from playwright_stealth import stealth

from listing_scraper import config

logger = structlog.get_logger(__name__)

VIEWPORT = {"width": 1440, "height": 900}  # common macOS resolution

EXTRA_HTTP_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "DNT": "1",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Referer": config.REFERER,
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "cross-site",
    "Sec-Fetch-User": "?1",
    "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"macOS"',
}


def _random_token(length: int = 13) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def session_cookies(domain: str = config.COOKIE_DOMAIN) -> list[dict]:
    """Analytics-style cookies a returning visitor would already carry."""
    values = {
        "_ga": "GA1.2." + _random_token(),
        "_gid": "GA1.2." + _random_token(),
        "session_id": _random_token(),
        "visited": "true",
    }
    return [{"name": name, "value": value, "domain": domain, "path": "/"} for name, value in values.items()]


async def build_context(browser):
    """Create an isolated context with spoofed identity. Does not navigate."""
    ctx = await browser.new_context(
        user_agent=config.USER_AGENT,
        viewport=VIEWPORT,
        locale="en-US",
        timezone_id="America/New_York",
        extra_http_headers=EXTRA_HTTP_HEADERS,
    )

    try:
        # Apply stealth mode
        stealth_instance = stealth.Stealth()
        await stealth_instance.apply_stealth_async(ctx)

        await ctx.add_cookies(session_cookies())
    except Exception:
        try:
            await ctx.close()
        except Exception as e:
            logger.error("Error closing context", error=str(e))
        raise
    logger.debug("Browser context ready", user_agent=config.USER_AGENT[:60], cookies=4)
    return ctx
