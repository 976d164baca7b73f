"""Tests for the per-site pipeline (classification → chain → finalisation).

Strategy chains are built from in-memory strategies, so no HTTP requests are
made and no browser is launched.
"""

from __future__ import annotations

import dataclasses
from unittest.mock import patch

import httpx
import pytest

from backend.discovery.models import FAILED, SUCCESS, CandidateLink, SiteResult
from backend.discovery.pipeline import (
    MAX_BLOG_URLS,
    NO_BLOGS_ERROR,
    build_default_chain,
    discover_site,
    top_unique,
)
from backend.discovery.strategies import DiscoveryStrategy, StrategyChain


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class _Canned(DiscoveryStrategy):
    def __init__(self, name: str, links: list[CandidateLink]) -> None:
        self._name = name
        self._links = links
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def discover(self, site_url: str) -> list[CandidateLink]:
        self.calls += 1
        return list(self._links)


class _Failing(DiscoveryStrategy):
    @property
    def name(self) -> str:
        return "rss"

    async def discover(self, site_url: str) -> list[CandidateLink]:
        raise RuntimeError("connection reset")


def _chain(name: str, *urls: str) -> StrategyChain:
    return StrategyChain([_Canned(name, [CandidateLink(url=u, source=name) for u in urls])])


# ---------------------------------------------------------------------------
# Direct posts
# ---------------------------------------------------------------------------

class TestDirectPosts:
    async def test_direct_post_skips_discovery(self) -> None:
        strategy = _Canned("rss", [CandidateLink(url="https://example.com/blog/x", source="rss")])
        url = "https://example.com/blog/my-first-post"

        result = await discover_site(url, chain=StrategyChain([strategy]))

        assert result.status == SUCCESS
        assert result.method == "direct"
        assert result.is_direct is True
        assert result.blog_urls == [url]
        assert result.blogs_found == 1
        assert strategy.calls == 0

    async def test_dated_blog_path_is_direct(self) -> None:
        url = "https://example.com/blog/2024/05/10/launch"
        result = await discover_site(url, chain=_chain("rss"))
        assert result.method == "direct"
        assert result.blog_urls == [url]

    async def test_direct_post_metadata(self) -> None:
        url = "https://example.com/blog/my-first-post"
        result = await discover_site(url, include_metadata=True, chain=_chain("rss"))
        assert result.blogs == [
            {"title": "My First Post", "url": url, "description": "", "publishedAt": None}
        ]


# ---------------------------------------------------------------------------
# Discovery outcomes
# ---------------------------------------------------------------------------

class TestDiscoveryOutcomes:
    async def test_feed_results_reported_with_method(self) -> None:
        chain = _chain("rss", "https://example.com/blog/a", "https://example.com/blog/b")
        result = await discover_site("https://example.com", chain=chain)

        assert result.status == SUCCESS
        assert result.method == "rss"
        assert result.is_direct is False
        assert result.blog_urls == ["https://example.com/blog/a", "https://example.com/blog/b"]
        assert result.blogs_found == 2
        assert result.blogs is None

    async def test_nothing_found_is_a_failure(self) -> None:
        result = await discover_site("https://example.com", chain=_chain("rss"))

        assert result.status == FAILED
        assert result.error == NO_BLOGS_ERROR
        assert result.method == "none"
        assert result.blogs_found == 0
        assert result.blog_urls == []

    async def test_tag_page_with_nothing_found(self) -> None:
        result = await discover_site("https://example.com/tag/ai", chain=_chain("rss"))
        assert result.status == FAILED
        assert result.method == "none"

    async def test_only_self_is_direct_circular(self) -> None:
        site = "https://example.com/blog"
        result = await discover_site(site, chain=_chain("scraping", "https://example.com/blog/"))

        assert result.status == SUCCESS
        assert result.method == "direct-circular"
        assert result.is_direct is True
        assert result.blog_urls == [site]

    async def test_all_duplicates_of_self(self) -> None:
        site = "https://example.com/news"
        chain = _chain("sitemap", site, "https://example.com/news/", "HTTPS://EXAMPLE.COM/news")
        result = await discover_site(site, chain=chain)

        assert result.method == "direct-duplicate"
        assert result.blog_urls == [site]
        assert result.blogs_found == 1

    async def test_strategy_exception_becomes_failed_result(self) -> None:
        result = await discover_site("https://example.com", chain=StrategyChain([_Failing()]))

        assert result.status == FAILED
        assert result.error == "Failed to fetch blogs: connection reset"
        assert result.method == "none"

    async def test_results_capped_and_deduplicated(self) -> None:
        urls = [f"https://example.com/blog/post-{i % 12}" for i in range(20)]
        result = await discover_site("https://example.com", chain=_chain("sitemap", *urls))

        assert result.blogs_found == MAX_BLOG_URLS
        assert result.blog_urls == [f"https://example.com/blog/post-{i}" for i in range(10)]

    async def test_metadata_from_first_occurrence(self) -> None:
        links = [
            CandidateLink(
                url="https://example.com/blog/a",
                source="rss",
                title="Post A",
                description="About A",
                published="2024-05-01",
            ),
            CandidateLink(url="https://example.com/blog/a", source="rss", title="Duplicate"),
            CandidateLink(url="https://example.com/blog/b-side", source="rss"),
        ]
        chain = StrategyChain([_Canned("rss", links)])
        result = await discover_site("https://example.com", include_metadata=True, chain=chain)

        assert result.blogs == [
            {
                "title": "Post A",
                "url": "https://example.com/blog/a",
                "description": "About A",
                "publishedAt": "2024-05-01",
            },
            {
                "title": "B Side",
                "url": "https://example.com/blog/b-side",
                "description": "",
                "publishedAt": None,
            },
        ]

    async def test_default_chain_used_when_none_given(self) -> None:
        with patch(
            "backend.discovery.pipeline.build_default_chain",
            return_value=_chain("rss", "https://example.com/blog/a"),
        ) as build:
            result = await discover_site("https://example.com")

        build.assert_called_once()
        assert result.method == "rss"

    async def test_to_dict_shape(self) -> None:
        result = await discover_site("https://example.com", chain=_chain("rss", "https://example.com/blog/a"))
        data = result.to_dict()

        assert data["url"] == "https://example.com"
        assert data["status"] == "success"
        assert data["blogsFound"] == 1
        assert data["blogUrls"] == ["https://example.com/blog/a"]
        assert data["method"] == "rss"
        assert data["isDirect"] is False
        assert data["duration"].endswith("ms")
        assert "error" not in data
        assert "blogs" not in data


class TestSiteResultIsReadOnly:
    async def test_fields_cannot_be_reassigned(self) -> None:
        result = await discover_site("https://example.com", chain=_chain("rss", "https://example.com/blog/a"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.status = FAILED

    def test_caller_lists_are_copied(self) -> None:
        urls = ["https://example.com/blog/a"]
        blogs = [{"title": "A", "url": urls[0], "description": "", "publishedAt": None}]
        result = SiteResult(
            url="https://example.com",
            status=SUCCESS,
            blogs_found=1,
            duration_ms=1,
            blog_urls=urls,
            blogs=blogs,
        )
        urls.append("https://example.com/blog/b")
        blogs[0]["title"] = "Changed"

        assert result.blog_urls == ["https://example.com/blog/a"]
        assert result.blogs[0]["title"] == "A"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestTopUnique:
    def test_first_occurrence_order(self) -> None:
        urls = [f"u{i % 10}" for i in range(25)]
        assert top_unique(urls) == [f"u{i}" for i in range(10)]

    def test_skips_empty_values(self) -> None:
        assert top_unique(["a", "", "b", "a", "c"]) == ["a", "b", "c"]

    def test_respects_limit(self) -> None:
        assert top_unique(["a", "b", "c"], limit=2) == ["a", "b"]


class TestDefaultChain:
    async def test_strategy_order(self) -> None:
        async with httpx.AsyncClient() as client:
            chain = build_default_chain(client)
        assert [s.name for s in chain.strategies] == ["rss", "sitemap", "scraping"]
