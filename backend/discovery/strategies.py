"""Discovery strategies and the chain that runs them in order.

Every strategy shares one interface: ``await discover(site_url) ->
list[CandidateLink]``.  A strategy must return ``[]`` (not raise) when it
simply finds nothing; anything it does raise is turned into a failed result
by the pipeline.

Default order (see :func:`backend.discovery.pipeline.build_default_chain`):
  1. Feeds    — RSS / Atom at well-known paths.
  2. Sitemaps — ``urlset`` or ``sitemapindex`` at well-known paths.
  3. Scraping — one static HTML fetch, escalating to a headless browser when
     the static page yields fewer than ``settings.min_static_results`` links.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from urllib.parse import urljoin

import httpx

from backend.config import settings
from backend.discovery.classifier import is_blog_url
from backend.discovery.extractor import (
    extract_anchors,
    parse_feed,
    parse_sitemap,
    title_from_url,
)
from backend.discovery.fetcher import fetch_bytes, fetch_html
from backend.discovery.models import CandidateLink, StrategyResult
from backend.discovery.urls import comparable_url

FEED_PATHS = [
    "/feed",
    "/rss",
    "/feed.xml",
    "/rss.xml",
    "/blog/feed",
    "/atom.xml",
    "/feed/",
    "/rss/",
    "/index.xml",
    "?feed=rss2",
    "?feed=atom",
]

SITEMAP_PATHS = [
    "/sitemap.xml",
    "/sitemap_index.xml",
    "/blog-sitemap.xml",
    "/post-sitemap.xml",
]

# Child sitemaps fetched from a sitemap index.
_MAX_CHILD_SITEMAPS = 3


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class DiscoveryStrategy(ABC):
    """Abstract base class for a single discovery technique."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Method name reported on a successful :class:`SiteResult`."""

    @abstractmethod
    async def discover(self, site_url: str) -> list[CandidateLink]:
        """Return candidate links in discovery order.  ``[]`` when none found."""


# ---------------------------------------------------------------------------
# Feeds
# ---------------------------------------------------------------------------

class FeedStrategy(DiscoveryStrategy):
    """Read the first RSS / Atom feed found at one of :data:`FEED_PATHS`."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "rss"

    async def discover(self, site_url: str) -> list[CandidateLink]:
        for path in FEED_PATHS:
            feed_url = urljoin(site_url, path)
            try:
                content = await fetch_bytes(self._client, feed_url, settings.feed_timeout)
                links = parse_feed(content, feed_url)
            except Exception as exc:
                print(f"[rss] {feed_url} failed: {exc!r:.120}")
                continue
            if links:
                print(f"[rss] ✓ {feed_url} → {len(links)} item(s).")
                return links
            print(f"[rss] {feed_url} is not a feed or has no items.")
        return []


# ---------------------------------------------------------------------------
# Sitemaps
# ---------------------------------------------------------------------------

class SitemapStrategy(DiscoveryStrategy):
    """Read the first sitemap at one of :data:`SITEMAP_PATHS` that lists articles.

    A ``urlset`` contributes its ``<loc>`` entries filtered through
    :func:`is_blog_url`.  A ``sitemapindex`` is followed into at most
    ``_MAX_CHILD_SITEMAPS`` children whose URL mentions ``blog`` or ``post``.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "sitemap"

    def _blog_links(self, entries, site_url: str) -> list[CandidateLink]:
        return [
            CandidateLink(url=loc, source="sitemap", title=title_from_url(loc), published=lastmod)
            for loc, lastmod in entries
            if is_blog_url(loc, site_url)
        ]

    async def _follow_index(self, entries, site_url: str) -> list[CandidateLink]:
        children = [loc for loc, _ in entries if "blog" in loc or "post" in loc]
        for child_url in children[:_MAX_CHILD_SITEMAPS]:
            try:
                content = await fetch_bytes(self._client, child_url, settings.sitemap_timeout)
                kind, child_entries = parse_sitemap(content)
            except Exception as exc:
                print(f"[sitemap] child {child_url} failed: {exc!r:.120}")
                continue
            if kind != "urlset":
                continue
            links = self._blog_links(child_entries, site_url)
            if links:
                print(f"[sitemap] ✓ child {child_url} → {len(links)} article URL(s).")
                return links
        return []

    async def discover(self, site_url: str) -> list[CandidateLink]:
        for path in SITEMAP_PATHS:
            sitemap_url = urljoin(site_url, path)
            try:
                content = await fetch_bytes(self._client, sitemap_url, settings.sitemap_timeout)
                kind, entries = parse_sitemap(content)
                if kind == "urlset":
                    links = self._blog_links(entries, site_url)
                elif kind == "sitemapindex":
                    links = await self._follow_index(entries, site_url)
                else:
                    links = []
            except Exception as exc:
                print(f"[sitemap] {sitemap_url} failed: {exc!r:.120}")
                continue
            if links:
                print(f"[sitemap] ✓ {sitemap_url} → {len(links)} article URL(s).")
                return links
            print(f"[sitemap] {sitemap_url} listed no article URLs.")
        return []


# ---------------------------------------------------------------------------
# Static HTML scrape
# ---------------------------------------------------------------------------

class StaticScrapeStrategy(DiscoveryStrategy):
    """Fetch the site page once and keep the links that look like articles."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "static"

    async def discover(self, site_url: str) -> list[CandidateLink]:
        try:
            final_url, html = await fetch_html(self._client, site_url, settings.page_timeout)
        except Exception as exc:
            print(f"[scrape] {site_url} failed: {exc!r:.120}")
            return []

        # The page itself is never a candidate.
        seen = {comparable_url(site_url), comparable_url(final_url)}
        links: list[CandidateLink] = []
        for url, text in extract_anchors(html, site_url):
            key = comparable_url(url)
            if key in seen or not is_blog_url(url, site_url):
                continue
            seen.add(key)
            links.append(
                CandidateLink(url=url, source="static", title=text or title_from_url(url))
            )
        print(f"[scrape] {site_url} → {len(links)} article link(s).")
        return links


# ---------------------------------------------------------------------------
# Static → headless escalation
# ---------------------------------------------------------------------------

class EscalatingScrapeStrategy(DiscoveryStrategy):
    """Run *primary*; fall back to *fallback* when it finds too few links.

    With fewer than *min_results* primary links the fallback runs too and
    whichever found more wins.  A tie goes to the primary.
    """

    def __init__(
        self,
        primary: DiscoveryStrategy,
        fallback: DiscoveryStrategy | None,
        min_results: int | None = None,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._min_results = settings.min_static_results if min_results is None else min_results

    @property
    def name(self) -> str:
        return "scraping"

    async def discover(self, site_url: str) -> list[CandidateLink]:
        primary_links = await self._primary.discover(site_url)
        if len(primary_links) >= self._min_results or self._fallback is None:
            return primary_links

        print(
            f"[scrape] {self._primary.name} found {len(primary_links)} "
            f"(< {self._min_results}); escalating to {self._fallback.name} …"
        )
        fallback_links = await self._fallback.discover(site_url)
        if len(fallback_links) > len(primary_links):
            return fallback_links
        return primary_links


# ---------------------------------------------------------------------------
# Strategy chain
# ---------------------------------------------------------------------------

class StrategyChain:
    """Try strategies in order; return the first non-empty result."""

    def __init__(self, strategies: list[DiscoveryStrategy]) -> None:
        self._strategies = strategies

    @property
    def strategies(self) -> list[DiscoveryStrategy]:
        return list(self._strategies)

    async def run(self, site_url: str) -> StrategyResult:
        for strategy in self._strategies:
            candidates = await strategy.discover(site_url)
            if candidates:
                return StrategyResult(method=strategy.name, candidates=candidates)
            print(f"[chain] {strategy.name} found nothing for {site_url}.")
        print(f"[chain] all strategies came back empty for {site_url}.")
        return StrategyResult(method="none")
