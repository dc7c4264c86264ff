"""Application configuration: environment variables and derived constants.

Loads ``BOT_TOKEN``, the API base URL, request timeouts and logging options
from the environment via ``python-dotenv``.  All values are resolved at import
time so other modules can ``from config import …`` without repeated lookups.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import logging
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── core ─────────────────────────────────────────────────────────────────────
from core.logger import CourierLogger

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_float(name: str, default: float) -> float:
    """Read a positive number from the environment, falling back to *default*."""
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        _invalid.append(name)
        return default
    if value <= 0:
        _invalid.append(name)
        return default
    return value


def _parse_bool(raw: str | None) -> bool:
    return (raw or "").strip().lower() in ("1", "true", "yes", "on")


def _parse_level(raw: str | None) -> int:
    level = logging.getLevelName((raw or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


_invalid: list[str] = []

# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN")
API_BASE_URL: str = os.environ.get("API_BASE_URL", "https://api.telegram.org").rstrip("/")
REQUEST_TIMEOUT: float = _parse_float("REQUEST_TIMEOUT", 60)
CONNECT_TIMEOUT: float = _parse_float("CONNECT_TIMEOUT", 10)
ASYNC_REQUESTS: bool = _parse_bool(os.environ.get("ASYNC_REQUESTS"))
LOG_LEVEL: int = _parse_level(os.environ.get("LOG_LEVEL"))
LOG_DIR: str | None = os.environ.get("LOG_DIR") or None


# ── Startup diagnostics ─────────────────────────────────────────────────────

logger = CourierLogger.get_logger(LOG_LEVEL, LOG_DIR)

if BOT_TOKEN:
    logger.info("Config loaded, BOT_TOKEN is set", extra={"api_base_url": API_BASE_URL})
else:
    logger.warning("Config loaded, BOT_TOKEN is NOT set")

for _name in _invalid:
    logger.warning("Ignoring invalid numeric setting, using default", extra={"setting": _name})
