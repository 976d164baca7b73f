"""Per-site discovery pipeline.

``discover_site`` is the single entry point.  For one site URL it:

1. returns the URL itself when it is already a direct post;
2. otherwise runs the strategy chain (feeds → sitemaps → scraping);
3. recognises scrapes that only found the site URL again (``direct-circular``
   / ``direct-duplicate``);
4. caps everything else at :data:`MAX_BLOG_URLS` unique URLs.

It never raises for a site-level problem: failures come back as a
``status="failed"`` :class:`SiteResult`.
"""

from __future__ import annotations

import time
from typing import Any, Iterable, Optional

import httpx

from backend.discovery.browser import HeadlessStrategy
from backend.discovery.classifier import classify_url
from backend.discovery.extractor import title_from_url
from backend.discovery.fetcher import new_client
from backend.discovery.models import (
    FAILED,
    SUCCESS,
    CandidateLink,
    SiteResult,
    StrategyResult,
)
from backend.discovery.strategies import (
    EscalatingScrapeStrategy,
    FeedStrategy,
    SitemapStrategy,
    StaticScrapeStrategy,
    StrategyChain,
)
from backend.discovery.urls import comparable_url

MAX_BLOG_URLS = 10

NO_BLOGS_ERROR = (
    "No blog posts found. This site may not have a blog section, RSS feed, or sitemap."
)


def top_unique(urls: Iterable[str], limit: int = MAX_BLOG_URLS) -> list[str]:
    """Return the first *limit* distinct, non-empty URLs in their original order."""
    unique: list[str] = []
    seen: set[str] = set()
    for url in urls:
        if not url or url in seen:
            continue
        seen.add(url)
        unique.append(url)
        if len(unique) >= limit:
            break
    return unique


def build_default_chain(client: httpx.AsyncClient) -> StrategyChain:
    """Feeds → sitemaps → static scrape (escalating to a headless browser)."""
    return StrategyChain(
        [
            FeedStrategy(client),
            SitemapStrategy(client),
            EscalatingScrapeStrategy(StaticScrapeStrategy(client), HeadlessStrategy()),
        ]
    )


# ---------------------------------------------------------------------------
# Result builders
# ---------------------------------------------------------------------------

def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _entry(link: CandidateLink) -> dict[str, Any]:
    return {
        "title": link.title or title_from_url(link.url),
        "url": link.url,
        "description": link.description or "",
        "publishedAt": link.published,
    }


def _direct(site_url: str, method: str, start: float, include_metadata: bool) -> SiteResult:
    return SiteResult(
        url=site_url,
        status=SUCCESS,
        blogs_found=1,
        duration_ms=_elapsed_ms(start),
        blog_urls=[site_url],
        method=method,
        is_direct=True,
        blogs=[_entry(CandidateLink(url=site_url, source=method))] if include_metadata else None,
    )


def _failed(site_url: str, error: str, start: float) -> SiteResult:
    return SiteResult(
        url=site_url,
        status=FAILED,
        blogs_found=0,
        duration_ms=_elapsed_ms(start),
        blog_urls=[],
        method="none",
        is_direct=False,
        error=error,
    )


def finalize(
    site_url: str,
    outcome: StrategyResult,
    start: float,
    include_metadata: bool = False,
) -> SiteResult:
    """Turn the chain's :class:`StrategyResult` into a :class:`SiteResult`."""
    raw = [u for u in outcome.urls if u]
    if not raw:
        return _failed(site_url, NO_BLOGS_ERROR, start)

    site_key = comparable_url(site_url)
    if len(raw) == 1 and comparable_url(raw[0]) == site_key:
        print(f"[pipeline] {site_url}: scrape found only itself, treating as direct post.")
        return _direct(site_url, "direct-circular", start, include_metadata)
    if {comparable_url(u) for u in raw} == {site_key}:
        print(f"[pipeline] {site_url}: every result duplicates the source, treating as direct post.")
        return _direct(site_url, "direct-duplicate", start, include_metadata)

    blog_urls = top_unique(raw)
    blogs: Optional[list[dict[str, Any]]] = None
    if include_metadata:
        first_seen: dict[str, CandidateLink] = {}
        for link in outcome.candidates:
            first_seen.setdefault(link.url, link)
        blogs = [_entry(first_seen[u]) for u in blog_urls]

    return SiteResult(
        url=site_url,
        status=SUCCESS,
        blogs_found=len(blog_urls),
        duration_ms=_elapsed_ms(start),
        blog_urls=blog_urls,
        method=outcome.method,
        is_direct=False,
        blogs=blogs,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def discover_site(
    site_url: str,
    include_metadata: bool = False,
    chain: StrategyChain | None = None,
) -> SiteResult:
    """Discover up to ten article URLs for *site_url*.

    Args:
        site_url: Absolute, already-normalised site or article URL.
        include_metadata: Attach ``blogs`` entries (title, description,
            publish date) to the result.
        chain: Strategy chain to use.  When ``None`` a default chain is built
            around a fresh HTTP client that is closed before returning.

    Returns:
        The finalised :class:`SiteResult`.  Never raises for site-level
        failures; cancellation still propagates.
    """
    start = time.perf_counter()

    verdict = classify_url(site_url)
    if verdict.is_direct:
        print(f"[pipeline] {site_url} is a direct post ({verdict.rule}).")
        return _direct(site_url, "direct", start, include_metadata)
    print(f"[pipeline] {site_url} looks like a listing page ({verdict.rule}); discovering …")

    try:
        if chain is None:
            async with new_client() as client:
                outcome = await build_default_chain(client).run(site_url)
        else:
            outcome = await chain.run(site_url)
    except Exception as exc:
        print(f"[pipeline] ✗ {site_url}: {exc!r:.200}")
        return _failed(site_url, f"Failed to fetch blogs: {exc}", start)

    result = finalize(site_url, outcome, start, include_metadata)
    if result.ok:
        print(f"[pipeline] ✓ {site_url}: {result.blogs_found} URL(s) via {result.method}.")
    else:
        print(f"[pipeline] ✗ {site_url}: {result.error}")
    return result
