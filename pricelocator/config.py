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

def _env_optional_float(name: str) -> float | None:
    v = os.getenv(name)
    if v is None or not v.strip():
        return None
    return float(v)

def _env_optional_int(name: str) -> int | None:
    v = os.getenv(name)
    if v is None or not v.strip():
        return None
    return int(v)

DEBUG   = _env_bool("DEBUG", False)
HEADFUL = _env_bool("HEADFUL", True)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_5) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Extractor service
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL   = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8080"))

# Selector / dispatch
EXTRACTOR_URL    = os.getenv("EXTRACTOR_URL", f"http://{HOST}:{PORT}/")
DISPATCH_TIMEOUT = _env_optional_float("DISPATCH_TIMEOUT")  # None = no timeout
MAX_HTML_CHARS   = _env_optional_int("MAX_HTML_CHARS")      # None = unbounded
HIGHLIGHT_STYLE  = os.getenv("HIGHLIGHT_STYLE", "3px solid blue")


def configure_logging() -> None:
    level = logging.DEBUG if DEBUG else logging.INFO
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))
