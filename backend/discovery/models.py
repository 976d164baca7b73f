"""Data models for the discovery pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

SUCCESS = "success"
FAILED = "failed"


@dataclass(frozen=True)
class ClassificationVerdict:
    """Whether a URL already points at a single article, and which rule said so."""

    url: str
    is_direct: bool
    rule: str


@dataclass(frozen=True)
class CandidateLink:
    """An absolute URL found by one strategy, with optional lightweight metadata."""

    url: str
    source: str
    title: Optional[str] = None
    description: Optional[str] = None
    published: Optional[str] = None


@dataclass
class StrategyResult:
    """The outcome of running the strategy chain for one site.

    ``method`` names the strategy that produced ``candidates`` (``"none"`` when
    every strategy came back empty).
    """

    method: str
    candidates: List[CandidateLink] = field(default_factory=list)

    @property
    def urls(self) -> List[str]:
        return [c.url for c in self.candidates]


@dataclass(frozen=True)
class SiteResult:
    """The finalised discovery record for one input URL.  Read-only once built."""

    url: str
    status: str
    blogs_found: int
    duration_ms: int
    blog_urls: List[str] = field(default_factory=list)
    method: str = "none"
    is_direct: bool = False
    error: Optional[str] = None
    blogs: Optional[List[dict[str, Any]]] = None

    def __post_init__(self) -> None:
        # Detach from the caller's lists.
        object.__setattr__(self, "blog_urls", list(self.blog_urls))
        if self.blogs is not None:
            object.__setattr__(self, "blogs", [dict(b) for b in self.blogs])

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the key names the API layer and webhook consumers expect."""
        data: dict[str, Any] = {
            "url": self.url,
            "status": self.status,
            "blogsFound": self.blogs_found,
            "duration": f"{self.duration_ms}ms",
            "blogUrls": list(self.blog_urls),
            "method": self.method,
            "isDirect": self.is_direct,
        }
        if self.error is not None:
            data["error"] = self.error
        if self.blogs is not None:
            data["blogs"] = self.blogs
        return data


@dataclass
class BatchSummary:
    """Aggregate counts over a batch of :class:`SiteResult`."""

    total_urls: int
    successful: int
    failed: int
    total_blogs_found: int

    def to_dict(self) -> dict[str, int]:
        return {
            "totalUrls": self.total_urls,
            "successful": self.successful,
            "failed": self.failed,
            "totalBlogsFound": self.total_blogs_found,
        }


@dataclass
class RelayStatus:
    """Outcome of forwarding discovered URLs to the workflow webhook."""

    attempted: bool
    success: bool = False
    status_code: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempted": self.attempted,
            "success": self.success,
            "statusCode": self.status_code,
            "error": self.error,
        }
