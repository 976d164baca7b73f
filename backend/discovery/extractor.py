"""Parsers that turn fetched documents into candidate links.

* :func:`parse_feed` reads RSS / Atom feeds with ``feedparser``.
* :func:`parse_sitemap` reads ``urlset`` and ``sitemapindex`` documents.
* :func:`extract_anchors` walks an HTML page with BeautifulSoup.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple
from urllib.parse import urljoin, urlsplit

import feedparser
from bs4 import BeautifulSoup

from backend.discovery.models import CandidateLink
from backend.discovery.urls import origin, path_segments

# Link-bearing regions visited first, in order.  Every other anchor follows.
_CONTENT_SELECTORS = [
    "article a",
    ".blog a",
    ".post a",
    '[class*="blog"] a',
    '[class*="post"] a',
    '[class*="story"] a',
    '[class*="article"] a',
    'a[href*="/blog/"]',
    'a[href*="/post/"]',
    'a[href*="/article/"]',
    'a[href*="/news/"]',
    'a[href*="/story/"]',
    'a[href*="/stories/"]',
    "main a",
    '[role="main"] a',
    ".content a",
    "#content a",
]

_CHROME_REGIONS = ["header", "footer", "nav"]
_SKIPPED_HREF_PREFIXES = ("#", "mailto:", "javascript:", "tel:", "data:")

_DESCRIPTION_LIMIT = 200
_ANCHOR_TITLE_LIMIT = 150


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _local_name(tag: str) -> str:
    """Strip an ``{namespace}`` prefix from an ElementTree tag."""
    return tag.rsplit("}", 1)[-1]


def strip_html(html: str) -> str:
    """Return the visible text of an HTML fragment."""
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text(" ", strip=True)


def title_from_url(url: str) -> str:
    """Derive a readable title from the last path segment of *url*.

    ``https://x.com/blog/my-first_post.html`` → ``"My First Post"``.
    """
    try:
        segments = path_segments(urlsplit(url).path)
    except ValueError:
        return "Blog Post"
    if not segments:
        return "Blog Post"
    slug = re.sub(r"\.\w+$", "", segments[-1])
    words = re.split(r"[-_\s]+", slug)
    title = " ".join(w[:1].upper() + w[1:] for w in words if w)
    return title or "Blog Post"


# ---------------------------------------------------------------------------
# Feeds
# ---------------------------------------------------------------------------

def parse_feed(content: bytes, base_url: Optional[str] = None) -> List[CandidateLink]:
    """Return one :class:`CandidateLink` per RSS item / Atom entry with a link.

    Relative item links are resolved against *base_url*, normally the URL the
    feed was fetched from.

    Documents that ``feedparser`` does not recognise as a feed (HTML error
    pages, empty bodies) yield an empty list.
    """
    parsed = feedparser.parse(content)
    if not parsed.get("version"):
        return []

    links: List[CandidateLink] = []
    for entry in parsed.entries:
        link = (entry.get("link") or "").strip()
        if not link:
            continue
        if base_url:
            link = urljoin(base_url, link)
        description = strip_html(entry.get("summary", ""))[:_DESCRIPTION_LIMIT]
        links.append(
            CandidateLink(
                url=link,
                source="rss",
                title=(entry.get("title") or "Untitled").strip(),
                description=description,
                published=entry.get("published") or entry.get("updated"),
            )
        )
    return links


# ---------------------------------------------------------------------------
# Sitemaps
# ---------------------------------------------------------------------------

def parse_sitemap(content: bytes) -> Tuple[str, List[Tuple[str, Optional[str]]]]:
    """Parse a sitemap document.

    Returns:
        ``(kind, entries)`` where *kind* is the root element name
        (``"urlset"`` or ``"sitemapindex"`` for valid sitemaps) and *entries*
        is a list of ``(loc, lastmod)`` pairs.  Unknown roots give no entries.

    Raises:
        xml.etree.ElementTree.ParseError: If *content* is not well-formed XML.
    """
    root = ET.fromstring(content)
    kind = _local_name(root.tag)
    child_name = {"urlset": "url", "sitemapindex": "sitemap"}.get(kind)
    if child_name is None:
        return kind, []

    entries: List[Tuple[str, Optional[str]]] = []
    for child in root:
        if _local_name(child.tag) != child_name:
            continue
        loc: Optional[str] = None
        lastmod: Optional[str] = None
        for el in child:
            name = _local_name(el.tag)
            if name == "loc" and el.text and el.text.strip():
                loc = el.text.strip()
            elif name == "lastmod" and el.text:
                lastmod = el.text.strip()
        if loc:
            entries.append((loc, lastmod))
    return kind, entries


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

def extract_anchors(html: str, page_url: str) -> List[Tuple[str, str]]:
    """Return ``(absolute_url, anchor_text)`` pairs for every usable link.

    Anchors inside ``<header>``, ``<footer>`` or ``<nav>`` are ignored.
    Anchors matched by the content selectors come first, in selector order,
    followed by every remaining anchor in document order.  Relative hrefs are
    resolved against the page origin.
    """
    soup = BeautifulSoup(html, "html.parser")
    base = origin(page_url)

    ordered = []
    visited: set[int] = set()
    for selector in _CONTENT_SELECTORS:
        for tag in soup.select(selector):
            if id(tag) not in visited:
                visited.add(id(tag))
                ordered.append(tag)
    for tag in soup.find_all("a"):
        if id(tag) not in visited:
            visited.add(id(tag))
            ordered.append(tag)

    results: List[Tuple[str, str]] = []
    for tag in ordered:
        href = (tag.get("href") or "").strip()
        if not href or href.lower().startswith(_SKIPPED_HREF_PREFIXES):
            continue
        if tag.find_parent(_CHROME_REGIONS) is not None:
            continue
        full_url = href if href.lower().startswith(("http://", "https://")) else urljoin(base, href)
        text = tag.get_text(" ", strip=True)[:_ANCHOR_TITLE_LIMIT]
        results.append((full_url, text))
    return results
