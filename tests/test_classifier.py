"""Tests for the URL classifier and the site-profile lookup.

Everything here is pure: no network, no browser.
"""

from __future__ import annotations

import pytest

from backend.discovery.classifier import (
    classify_url,
    is_blog_url,
    is_direct_blog_post,
    is_medium_article,
)
from backend.discovery.profiles import MEDIUM, navigation_url, profile_for


# ---------------------------------------------------------------------------
# is_direct_blog_post / classify_url
# ---------------------------------------------------------------------------

class TestDirectPostRules:
    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/search?q=ai",
            "https://example.com/?p=123",
            "https://example.com/blog?page=2",
            "https://example.com/tag/ai?ref=home",
        ],
    )
    def test_query_string_is_always_direct(self, url: str) -> None:
        verdict = classify_url(url)
        assert verdict.is_direct is True
        assert verdict.rule == "query-string"

    def test_lone_question_mark_is_not_a_query(self) -> None:
        assert classify_url("https://example.com/blog?").rule == "listing-path"

    def test_opaque_id_segment(self) -> None:
        verdict = classify_url("https://www.bbc.com/news/articles/cvgk9rqx5kjo")
        assert verdict.is_direct is True
        assert verdict.rule == "opaque-id"

    def test_long_single_slug(self) -> None:
        verdict = classify_url("https://example.com/how-to-build-a-blog")
        assert verdict.is_direct is True
        assert verdict.rule == "long-slug"

    def test_single_segment_numeric_id(self) -> None:
        verdict = classify_url("https://example.com/story-1234567")
        assert verdict.is_direct is True
        assert verdict.rule == "numeric-id"

    def test_blog_date_path(self) -> None:
        verdict = classify_url("https://example.com/blog/2024/05/10/launch")
        assert verdict.is_direct is True
        assert verdict.rule == "date-path"

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/2023/11/15/some-post",
            "https://example.com/2023/11/dev/some-post",
        ],
    )
    def test_other_date_paths(self, url: str) -> None:
        assert classify_url(url).rule == "date-path"

    def test_file_extension(self) -> None:
        assert classify_url("https://example.com/docs/page.html").rule == "file-extension"
        assert classify_url("https://example.com/forum/view.php").rule == "file-extension"

    def test_platform_permalink(self) -> None:
        assert classify_url("https://medium.com/p/abc-def").rule == "permalink"

    def test_keyword_followed_by_slug(self) -> None:
        verdict = classify_url("https://example.com/blog/my-first-post")
        assert verdict.is_direct is True
        assert verdict.rule == "keyword-slug"

    def test_keyword_multi_segment_slug(self) -> None:
        verdict = classify_url("https://example.com/news/world/election-results")
        assert verdict.is_direct is True
        assert verdict.rule == "keyword-multi-segment"


class TestListingRules:
    @pytest.mark.parametrize(
        "path",
        ["/", "/blog", "/blog/", "/news", "/articles", "/posts", "/category/x", "/tag/ai"],
    )
    def test_listing_shapes_are_not_direct(self, path: str) -> None:
        assert is_direct_blog_post(f"https://example.com{path}") is False

    def test_bare_host_is_root(self) -> None:
        assert classify_url("https://example.com").rule == "listing-path"

    def test_pagination(self) -> None:
        assert classify_url("https://example.com/page/2").rule == "listing-path"

    def test_single_plain_segment(self) -> None:
        verdict = classify_url("https://example.com/about")
        assert verdict.is_direct is False
        assert verdict.rule == "too-few-segments"

    def test_ambiguous_defaults_to_listing(self) -> None:
        verdict = classify_url("https://example.com/products/widgets")
        assert verdict.is_direct is False
        assert verdict.rule == "default"

    def test_malformed_url_never_raises(self) -> None:
        verdict = classify_url("http://[::1")
        assert verdict.is_direct is False
        assert verdict.rule == "malformed"


# ---------------------------------------------------------------------------
# is_blog_url
# ---------------------------------------------------------------------------

class TestIsBlogUrl:
    SITE = "https://www.example.com"

    def test_accepts_blog_keyword_path(self) -> None:
        assert is_blog_url("https://example.com/blog/my-post", self.SITE) is True

    def test_accepts_date_path(self) -> None:
        assert is_blog_url("https://example.com/2024/01/hello", self.SITE) is True

    def test_accepts_long_slug_fallback(self) -> None:
        assert is_blog_url("https://example.com/this-is-a-great-read", self.SITE) is True

    def test_accepts_numeric_suffix_fallback(self) -> None:
        assert is_blog_url("https://example.com/item-1234567", self.SITE) is True

    @pytest.mark.parametrize(
        "candidate",
        [
            "https://other.com/blog/my-post",
            "https://blog.example.com/blog/my-post",
            "https://example.org/2024/01/hello",
            "https://evil-example.com/this-is-a-great-read",
        ],
    )
    def test_rejects_other_hosts(self, candidate: str) -> None:
        assert is_blog_url(candidate, self.SITE) is False

    @pytest.mark.parametrize(
        "candidate",
        [
            "https://example.com/tag/python",
            "https://example.com/blog/page/2",
            "https://example.com/category/news/",
            "https://example.com/blog/image.png",
            "https://example.com/wp-content/uploads/2024/01/photo",
            "https://example.com/search/blog-posts-about-things",
            "https://example.com/login",
            "https://example.com/shop/new-arrivals-this-week-only",
            "https://example.com/about",
            "https://example.com/privacy",
            "https://example.com/",
            "https://example.com",
        ],
    )
    def test_rejects_excluded_paths(self, candidate: str) -> None:
        assert is_blog_url(candidate, self.SITE) is False

    def test_rejects_unrelated_page(self) -> None:
        assert is_blog_url("https://example.com/pricing", self.SITE) is False

    def test_keyword_alone_is_not_an_article(self) -> None:
        assert is_blog_url("https://example.com/blog/", self.SITE) is False

    @pytest.mark.parametrize("candidate", ["http://[::1", "mailto:me@example.com", ""])
    def test_malformed_candidates_rejected(self, candidate: str) -> None:
        assert is_blog_url(candidate, self.SITE) is False

    def test_cross_domain_always_rejected(self) -> None:
        paths = ["/blog/a-post", "/2024/02/x", "/one-two-three-four", "/news/item"]
        hosts = ["https://a.com", "https://www.b.com", "http://c.io"]
        for host in hosts:
            for path in paths:
                assert is_blog_url(f"https://example.com{path}", host) is False


# ---------------------------------------------------------------------------
# is_medium_article
# ---------------------------------------------------------------------------

class TestIsMediumArticle:
    @pytest.mark.parametrize(
        "url",
        [
            "https://medium.com/@jane/building-things-1a2b3c4d5e6f",
            "https://jane.medium.com/my-story-abcdef12",
            "https://medium.com/some-publication/a-post-title-0f9e8d7c6b/",
        ],
    )
    def test_accepts_hash_permalinks(self, url: str) -> None:
        assert is_medium_article(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "https://medium.com/tag/programming",
            "https://medium.com/@jane",
            "https://medium.com/@jane/followers",
            "https://medium.com/m/signin",
            "https://medium.com/membership",
            "https://medium.com/",
            "https://medium.com/@jane/a-story-with-short-1a2b",
        ],
    )
    def test_rejects_non_articles(self, url: str) -> None:
        assert is_medium_article(url) is False


# ---------------------------------------------------------------------------
# Site profiles
# ---------------------------------------------------------------------------

class TestSiteProfiles:
    def test_profile_matches_host_and_subdomains(self) -> None:
        assert profile_for("https://medium.com/tag/ai") is MEDIUM
        assert profile_for("https://jane.medium.com/post") is MEDIUM
        assert profile_for("https://example.com/") is None
        assert profile_for("https://notmedium.com/") is None

    @pytest.mark.parametrize("url", ["https://medium.com", "https://medium.com/", "https://www.medium.com/"])
    def test_bare_root_is_substituted(self, url: str) -> None:
        assert navigation_url(url) == MEDIUM.homepage_fallback

    @pytest.mark.parametrize(
        "url",
        [
            "https://medium.com/@jane",
            "https://jane.medium.com/",
            "https://example.com/",
        ],
    )
    def test_other_urls_unchanged(self, url: str) -> None:
        assert navigation_url(url) == url
