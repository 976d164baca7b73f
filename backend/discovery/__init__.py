"""Blog discovery package — classify a site URL and find its articles.

Public API::

    from backend.discovery import discover_sites
    results = await discover_sites(["https://example.com"])
"""

from backend.discovery.classifier import (
    classify_url,
    is_blog_url,
    is_direct_blog_post,
    is_medium_article,
)
from backend.discovery.models import BatchSummary, CandidateLink, SiteResult
from backend.discovery.orchestrator import discover_sites, discover_sites_sync, summarize
from backend.discovery.pipeline import discover_site, top_unique

__all__ = [
    "classify_url",
    "is_blog_url",
    "is_direct_blog_post",
    "is_medium_article",
    "discover_site",
    "discover_sites",
    "discover_sites_sync",
    "summarize",
    "top_unique",
    "BatchSummary",
    "CandidateLink",
    "SiteResult",
]
