import logging
import os

import structlog
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

def _env_bool(name: str, default: bool=False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1","true","t","yes","y","on")

def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return int(v)

DEBUG   = _env_bool("DEBUG", False)
HEADFUL = _env_bool("HEADFUL", False)

HOST = os.getenv("HOST", "0.0.0.0")
PORT = _env_int("PORT", 3000)
FRONTEND_URL = os.getenv("FRONTEND_URL", "*")

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL   = os.getenv("OPENAI_MODEL", "gpt-4")
OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")

TARGET_DOMAIN = "bizbuysell.com"
COOKIE_DOMAIN = "." + TARGET_DOMAIN
SOURCE_TYPE   = "bizbuysell"

# Keep UA, client hints and platform consistent with each other
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
REFERER = "https://www.google.com/"

NAVIGATION_TIMEOUT_MS   = _env_int("NAVIGATION_TIMEOUT_MS", 30000)
CONTENT_WAIT_TIMEOUT_MS = _env_int("CONTENT_WAIT_TIMEOUT_MS", 20000)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-http2",
    "--disable-quic",
]

def is_target_url(url) -> bool:
    return bool(url) and isinstance(url, str) and TARGET_DOMAIN in url

def configure_logging() -> None:
    """Route structlog output through stdlib logging; pretty in DEBUG, JSON otherwise."""
    level = logging.DEBUG if DEBUG else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")
    renderer = structlog.dev.ConsoleRenderer() if DEBUG else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
