"""Small URL helpers shared by the classifier, the strategies and the API layer."""

from __future__ import annotations

import re
from urllib.parse import urlsplit, urlunsplit


def normalize_input_url(url: str) -> str:
    """Trim *url* and prepend ``https://`` when it has no http(s) scheme.

    Returns an empty string for blank input.
    """
    if not url:
        return ""
    trimmed = url.strip()
    if not trimmed:
        return ""
    if re.match(r"^https?://", trimmed, re.IGNORECASE):
        return trimmed
    return f"https://{trimmed}"


def is_valid_url(url: str) -> bool:
    """Return ``True`` if *url* is an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(url)
        return parts.scheme in ("http", "https") and bool(parts.hostname)
    except ValueError:
        return False


def comparable_url(url: str) -> str:
    """Lower-case *url* and drop trailing slashes, for seen-set comparisons."""
    return url.strip().rstrip("/").lower()


def strip_query(url: str) -> str:
    """Remove the query string and fragment from *url*."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def bare_hostname(url: str) -> str:
    """Return the lower-cased hostname of *url* without a leading ``www.``.

    Raises:
        ValueError: If *url* has no hostname.
    """
    host = urlsplit(url).hostname
    if not host:
        raise ValueError(f"URL has no hostname: {url!r}")
    return host[4:] if host.startswith("www.") else host


def path_segments(path: str) -> list[str]:
    return [s for s in path.split("/") if s]


def origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"
