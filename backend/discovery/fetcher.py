"""Async HTTP helpers shared by the feed, sitemap and static-HTML strategies."""

from __future__ import annotations

import httpx

from backend.config import settings


def new_client() -> httpx.AsyncClient:
    """Return an ``httpx.AsyncClient`` that looks like a desktop browser.

    One client is opened per site run and closed when the run finishes.
    """
    return httpx.AsyncClient(
        headers=settings.browser_headers,
        follow_redirects=True,
    )


async def fetch_bytes(client: httpx.AsyncClient, url: str, timeout: float) -> bytes:
    """GET *url* and return the raw body.

    Raises:
        httpx.HTTPStatusError: If the server returns a 4xx/5xx status code.
        httpx.TimeoutException: If the request exceeds *timeout* seconds.
    """
    response = await client.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


async def fetch_html(client: httpx.AsyncClient, url: str, timeout: float) -> tuple[str, str]:
    """GET *url* and return ``(final_url, html)`` after redirects.

    Raises:
        httpx.HTTPStatusError: If the server returns a 4xx/5xx status code.
    """
    response = await client.get(url, timeout=timeout)
    response.raise_for_status()
    return str(response.url), response.text
