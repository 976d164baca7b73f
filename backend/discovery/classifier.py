"""URL classification heuristics.

Two questions are answered here, both as pure functions that never raise:

* :func:`classify_url` / :func:`is_direct_blog_post`: does this URL already
  point at one specific article, or at a homepage / listing page?
* :func:`is_blog_url`: is a link found on a site plausibly one of that site's
  articles?

:func:`is_medium_article` is the platform-specific article rule used through
:mod:`backend.discovery.profiles`.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from backend.discovery.models import ClassificationVerdict
from backend.discovery.urls import bare_hostname, path_segments

# ---------------------------------------------------------------------------
# Direct-post heuristics
# ---------------------------------------------------------------------------
_OPAQUE_ID = re.compile(r"^[a-z0-9]+$", re.IGNORECASE)
_TRAILING_NUMERIC_ID = re.compile(r"\d{6}$")

_LISTING_PATTERNS = [
    re.compile(r"^/$"),
    re.compile(r"^/blog/?$", re.IGNORECASE),
    re.compile(r"^/news/?$", re.IGNORECASE),
    re.compile(r"^/articles?/?$", re.IGNORECASE),
    re.compile(r"^/posts?/?$", re.IGNORECASE),
    re.compile(r"^/blogs/?$", re.IGNORECASE),
    re.compile(r"^/category/", re.IGNORECASE),
    re.compile(r"^/tag/", re.IGNORECASE),
    re.compile(r"^/author/", re.IGNORECASE),
    re.compile(r"^/page/\d+", re.IGNORECASE),
]

_DATE_PATTERNS = [
    re.compile(r"/blog/\d{4}/\d{2}/\d{2}/.+", re.IGNORECASE),
    re.compile(r"/\d{4}/\d{2}/\d{2}/.+"),
    re.compile(r"/\d{4}/\d{2}/.+/.+"),
]

_FILE_EXTENSION = re.compile(r"\.(html?|php)$", re.IGNORECASE)
_PERMALINK = re.compile(r"/p/[\w-]+$", re.IGNORECASE)
_KEYWORD_SLUG = re.compile(r"/(blog|article|articles|post|news|story)/[^/]+$", re.IGNORECASE)
_ARTICLE_KEYWORDS = {"blog", "article", "articles", "post", "news", "story"}

# ---------------------------------------------------------------------------
# Candidate-link heuristics
# ---------------------------------------------------------------------------
_EXCLUDE_PATTERNS = [
    # Archive pages (allowed when followed by more path)
    re.compile(r"/(tag|tags|category|categories|author|page)/[^/]*/?$", re.IGNORECASE),
    re.compile(
        r"/(search|login|signin|sign-in|signup|register|account|cart|checkout|shop|store)(/|$)",
        re.IGNORECASE,
    ),
    re.compile(r"\.(jpe?g|png|gif|svg|webp|ico|pdf|zip|css|js|json|xml|mp3|mp4|mov)$", re.IGNORECASE),
    re.compile(r"/(wp-content|wp-admin|wp-json|wp-includes|feed|cdn-cgi)(/|$)", re.IGNORECASE),
    re.compile(r"/(contact|about|privacy|privacy-policy|terms|terms-of-service)/?$", re.IGNORECASE),
]

_STRICT_BLOG_PATTERNS = [
    re.compile(r"/(blog|blogs|article|articles|post|posts|news|story|stories)/[^/]+", re.IGNORECASE),
    re.compile(r"/\d{4}/\d{2}/"),
]

# ---------------------------------------------------------------------------
# Medium
# ---------------------------------------------------------------------------
_MEDIUM_NON_ARTICLE = [
    re.compile(
        r"^/(tag|tags|topic|topics|search|m|membership|about|plans|me|lists|"
        r"creators|business|policy|verified-authors|jobs-at-medium)(/|$)",
        re.IGNORECASE,
    ),
    re.compile(r"/(followers|following|lists|about|has-recommended|subscribe)/?$", re.IGNORECASE),
]
_MEDIUM_POST_HASH = re.compile(r"-[0-9a-f]{8,12}$", re.IGNORECASE)


def classify_url(url: str) -> ClassificationVerdict:
    """Decide whether *url* is a direct post; the first matching rule wins."""
    try:
        parts = urlsplit(url)
        path = parts.path or "/"
        query = parts.query
    except ValueError:
        return ClassificationVerdict(url, False, "malformed")

    def verdict(is_direct: bool, rule: str) -> ClassificationVerdict:
        return ClassificationVerdict(url, is_direct, rule)

    if query:
        return verdict(True, "query-string")

    segments = path_segments(path)

    for segment in segments:
        if (
            len(segment) >= 8
            and _OPAQUE_ID.match(segment)
            and re.search(r"[a-z]", segment, re.IGNORECASE)
            and re.search(r"[0-9]", segment)
        ):
            return verdict(True, "opaque-id")

    if len(segments) == 1:
        if segments[0].count("-") >= 3:
            return verdict(True, "long-slug")
        if _TRAILING_NUMERIC_ID.search(segments[0]):
            return verdict(True, "numeric-id")

    if any(p.search(path) for p in _LISTING_PATTERNS):
        return verdict(False, "listing-path")

    if len(segments) < 2:
        return verdict(False, "too-few-segments")

    if any(p.search(path) for p in _DATE_PATTERNS):
        return verdict(True, "date-path")

    if _FILE_EXTENSION.search(path):
        return verdict(True, "file-extension")

    if _PERMALINK.search(path):
        return verdict(True, "permalink")

    if _KEYWORD_SLUG.search(path):
        return verdict(True, "keyword-slug")

    if len(segments) >= 3 and segments[0].lower() in _ARTICLE_KEYWORDS:
        last = segments[-1]
        if len(last) > 3 and ("-" in last or "_" in last):
            return verdict(True, "keyword-multi-segment")

    # Ambiguous: treat as a listing page.
    return verdict(False, "default")


def is_direct_blog_post(url: str) -> bool:
    """Return ``True`` if *url* already points at one specific article."""
    return classify_url(url).is_direct


def is_blog_url(url: str, site_url: str) -> bool:
    """Return ``True`` if *url* looks like an article belonging to *site_url*.

    Candidates on another host (``www.`` ignored) are always rejected.
    """
    try:
        if bare_hostname(url) != bare_hostname(site_url):
            return False
        path = urlsplit(url).path
    except ValueError:
        return False

    if path in ("", "/"):
        return False
    if any(p.search(path) for p in _EXCLUDE_PATTERNS):
        return False
    if any(p.search(path) for p in _STRICT_BLOG_PATTERNS):
        return True

    segments = path_segments(path)
    if not segments:
        return False
    last = segments[-1]
    return last.count("-") >= 3 or bool(_TRAILING_NUMERIC_ID.search(last))


def is_medium_article(url: str) -> bool:
    """Return ``True`` if *url* is a Medium story permalink (``…-<hex hash>``)."""
    try:
        path = urlsplit(url).path.rstrip("/")
    except ValueError:
        return False
    if not path:
        return False
    if any(p.search(path) for p in _MEDIUM_NON_ARTICLE):
        return False
    return bool(_MEDIUM_POST_HASH.search(path))
