"""Per-platform discovery rules, looked up by hostname.

Generic heuristics live in :mod:`backend.discovery.classifier`.  A platform
whose URLs don't follow them (article permalinks with opaque hashes, a
homepage that only renders for signed-in users, ...) gets a
:class:`SiteProfile` here instead of special cases in the generic code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlsplit

from backend.discovery.classifier import is_medium_article
from backend.discovery.urls import bare_hostname


@dataclass(frozen=True)
class SiteProfile:
    name: str
    hosts: tuple[str, ...]
    is_article: Callable[[str], bool]
    homepage_fallback: Optional[str] = None

    def matches(self, host: str) -> bool:
        host = host.lower()
        return any(host == h or host.endswith("." + h) for h in self.hosts)


MEDIUM = SiteProfile(
    name="medium",
    hosts=("medium.com",),
    is_article=is_medium_article,
    # The bare homepage is a sign-in wall; the tag listing is public.
    homepage_fallback="https://medium.com/tag/technology",
)

PROFILES: tuple[SiteProfile, ...] = (MEDIUM,)


def profile_for(url: str) -> SiteProfile | None:
    """Return the :class:`SiteProfile` whose hosts cover *url*, if any."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    for profile in PROFILES:
        if profile.matches(host):
            return profile
    return None


def navigation_url(url: str) -> str:
    """Return the URL a browser should actually load for *url*.

    Only the bare platform root is substituted; subdomains and deeper paths
    are returned unchanged.
    """
    profile = profile_for(url)
    if profile is None or not profile.homepage_fallback:
        return url
    try:
        parts = urlsplit(url)
        host = bare_hostname(url)
    except ValueError:
        return url
    if host in profile.hosts and parts.path in ("", "/") and not parts.query:
        return profile.homepage_fallback
    return url
