"""Headless-browser discovery strategy.

Renders the site in Chromium through Playwright, scrolls to trigger
lazy-loaded lists, then classifies every link outside the page chrome.  Used
as the escalation step after the static HTML scrape.

A browser is launched for a single :meth:`HeadlessStrategy.discover` call and
closed before it returns, whatever happens in between.  Playwright is imported
lazily so the rest of the package imports without browser binaries installed.
"""

from __future__ import annotations

from typing import Any, Iterable

from backend.config import settings
from backend.discovery.classifier import is_blog_url
from backend.discovery.extractor import title_from_url
from backend.discovery.models import CandidateLink
from backend.discovery.profiles import navigation_url, profile_for
from backend.discovery.strategies import DiscoveryStrategy
from backend.discovery.urls import comparable_url, strip_query

_LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
]
_VIEWPORT = {"width": 1366, "height": 768}
_READY_SELECTOR = "article, h1, h2"

# Hide the usual automation fingerprints before any page script runs.
_STEALTH_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
window.chrome = window.chrome || { runtime: {} };
"""

_SCROLL_HEIGHT_JS = "() => document.body ? document.body.scrollHeight : 0"
_SCROLL_BY_JS = "(y) => window.scrollBy(0, y)"

_COLLECT_LINKS_JS = """
() => Array.from(document.querySelectorAll('a[href]'))
    .filter(a => !a.closest('header, footer, nav'))
    .map(a => ({ href: a.href, text: (a.innerText || '').trim().slice(0, 150) }))
"""


async def auto_scroll(
    page: Any,
    step: int,
    max_distance: int,
    stale_limit: int,
    pause_ms: int,
) -> int:
    """Scroll *page* down in *step* pixel chunks and return the distance covered.

    Stops at *max_distance*, or once the bottom has been reached and the
    document height has not grown for *stale_limit* consecutive steps.
    """
    distance = 0
    stale = 0
    height = await page.evaluate(_SCROLL_HEIGHT_JS)
    while distance < max_distance and stale < stale_limit:
        await page.evaluate(_SCROLL_BY_JS, step)
        distance += step
        await page.wait_for_timeout(pause_ms)
        new_height = await page.evaluate(_SCROLL_HEIGHT_JS)
        if new_height > height:
            height = new_height
            stale = 0
        elif distance >= height:
            stale += 1
    return distance


def filter_links(
    anchors: Iterable[dict[str, Any]],
    site_url: str,
    current_url: str,
) -> list[CandidateLink]:
    """Turn rendered anchors into de-duplicated, query-free article candidates.

    Links on a platform with a profile (see :mod:`backend.discovery.profiles`)
    use that platform's article rule; everything else goes through
    :func:`is_blog_url`.
    """
    seen = {comparable_url(strip_query(site_url)), comparable_url(strip_query(current_url))}
    links: list[CandidateLink] = []

    for anchor in anchors:
        href = (anchor.get("href") or "").strip()
        if not href.lower().startswith(("http://", "https://")):
            continue
        try:
            url = strip_query(href)
        except ValueError:
            continue
        key = comparable_url(url)
        if key in seen:
            continue

        profile = profile_for(url)
        if profile is not None:
            accepted = profile.is_article(url)
        else:
            accepted = is_blog_url(url, site_url)
        if not accepted:
            continue

        seen.add(key)
        text = (anchor.get("text") or "").strip()
        links.append(CandidateLink(url=url, source="headless", title=text or title_from_url(url)))
    return links


class HeadlessStrategy(DiscoveryStrategy):
    """Render the page in a stealth-configured Chromium and scrape its links."""

    @property
    def name(self) -> str:
        return "headless"

    async def _render(self, target_url: str) -> tuple[str, list[dict[str, Any]]]:
        """Load *target_url*, scroll it, and return ``(final_url, anchors)``."""
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError  # noqa: PLC0415
        from playwright.async_api import async_playwright  # noqa: PLC0415

        nav_timeout_ms = int(settings.browser_nav_timeout * 1000)
        selector_timeout_ms = int(settings.browser_selector_timeout * 1000)

        async with async_playwright() as pw:
            browser = await pw.chromium.launch(
                headless=settings.browser_headless,
                args=_LAUNCH_ARGS,
            )
            try:
                context = await browser.new_context(
                    user_agent=settings.user_agent,
                    viewport=_VIEWPORT,
                    locale="en-US",
                )
                await context.add_init_script(_STEALTH_INIT_SCRIPT)
                page = await context.new_page()

                await page.goto(target_url, wait_until="domcontentloaded", timeout=nav_timeout_ms)
                try:
                    await page.wait_for_load_state("networkidle", timeout=nav_timeout_ms)
                except PlaywrightTimeoutError:
                    print(f"[browser] {target_url} never went network-idle, continuing.")
                try:
                    await page.wait_for_selector(_READY_SELECTOR, timeout=selector_timeout_ms)
                except PlaywrightTimeoutError:
                    print(f"[browser] no article/heading on {target_url}, continuing.")

                distance = await auto_scroll(
                    page,
                    step=settings.scroll_step,
                    max_distance=settings.scroll_max_distance,
                    stale_limit=settings.scroll_stale_limit,
                    pause_ms=settings.scroll_pause_ms,
                )
                print(f"[browser] scrolled {distance}px on {target_url}.")

                anchors = await page.evaluate(_COLLECT_LINKS_JS)
                return page.url, anchors or []
            finally:
                await browser.close()

    async def discover(self, site_url: str) -> list[CandidateLink]:
        if not settings.headless_enabled:
            print("[browser] headless scraping disabled (HEADLESS_ENABLED=false).")
            return []

        target_url = navigation_url(site_url)
        if target_url != site_url:
            print(f"[browser] {site_url} is a protected root; loading {target_url} instead.")

        try:
            current_url, anchors = await self._render(target_url)
        except Exception as exc:
            print(f"[browser] {target_url} failed: {exc!r:.120}")
            return []

        links = filter_links(anchors, site_url, current_url)
        print(f"[browser] {target_url} → {len(links)} article link(s).")
        return links
