"""Centralised settings for the blog discovery backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # HTTP strategies (seconds)
    # ------------------------------------------------------------------
    feed_timeout: float = field(
        default_factory=lambda: float(os.environ.get("FEED_TIMEOUT", "8.0"))
    )
    sitemap_timeout: float = field(
        default_factory=lambda: float(os.environ.get("SITEMAP_TIMEOUT", "8.0"))
    )
    page_timeout: float = field(
        default_factory=lambda: float(os.environ.get("PAGE_TIMEOUT", "10.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("USER_AGENT", _DEFAULT_USER_AGENT)
    )

    # ------------------------------------------------------------------
    # Headless browser
    # ------------------------------------------------------------------
    headless_enabled: bool = field(
        default_factory=lambda: _env_bool("HEADLESS_ENABLED", "true")
    )
    browser_headless: bool = field(
        default_factory=lambda: _env_bool("BROWSER_HEADLESS", "true")
    )
    browser_nav_timeout: float = field(
        default_factory=lambda: float(os.environ.get("BROWSER_NAV_TIMEOUT", "60.0"))
    )
    browser_selector_timeout: float = field(
        default_factory=lambda: float(os.environ.get("BROWSER_SELECTOR_TIMEOUT", "10.0"))
    )
    scroll_step: int = field(
        default_factory=lambda: int(os.environ.get("SCROLL_STEP", "800"))
    )
    scroll_max_distance: int = field(
        default_factory=lambda: int(os.environ.get("SCROLL_MAX_DISTANCE", "20000"))
    )
    scroll_stale_limit: int = field(
        default_factory=lambda: int(os.environ.get("SCROLL_STALE_LIMIT", "3"))
    )
    scroll_pause_ms: int = field(
        default_factory=lambda: int(os.environ.get("SCROLL_PAUSE_MS", "600"))
    )

    # ------------------------------------------------------------------
    # Pipeline / batch
    # ------------------------------------------------------------------
    min_static_results: int = field(
        default_factory=lambda: int(os.environ.get("MIN_STATIC_RESULTS", "3"))
    )
    max_concurrent_sites: int = field(
        default_factory=lambda: int(os.environ.get("MAX_CONCURRENT_SITES", "0"))
    )
    max_urls_per_request: int = field(
        default_factory=lambda: int(os.environ.get("MAX_URLS_PER_REQUEST", "50"))
    )

    # ------------------------------------------------------------------
    # Workflow webhook relay
    # ------------------------------------------------------------------
    webhook_url: str = field(
        default_factory=lambda: os.environ.get("WEBHOOK_URL", "")
    )
    webhook_timeout: float = field(
        default_factory=lambda: float(os.environ.get("WEBHOOK_TIMEOUT", "15.0"))
    )

    @property
    def browser_headers(self) -> dict[str, str]:
        """Headers sent with every plain HTTP request."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }


# Module-level singleton, import this everywhere:
#   from backend.config import settings
settings = Settings()
