"""Forward discovered URLs to the downstream workflow webhook.

The relay is best-effort: its outcome is reported next to the batch result
and never changes it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from backend.config import settings
from backend.discovery.models import RelayStatus, SiteResult


def build_payload(results: list[SiteResult]) -> dict[str, Any]:
    """Flatten and de-duplicate the URLs of every successful result."""
    urls: list[str] = []
    seen: set[str] = set()
    for result in results:
        if not result.ok:
            continue
        for url in result.blog_urls:
            if url not in seen:
                seen.add(url)
                urls.append(url)
    return {
        "urls": urls,
        "count": len(urls),
        "sources": [r.url for r in results],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def relay_results(
    results: list[SiteResult],
    webhook_url: str | None = None,
) -> RelayStatus:
    """POST the discovered URLs to *webhook_url* (default ``settings.webhook_url``).

    Returns a :class:`RelayStatus`; network and HTTP errors are reported in it
    rather than raised.
    """
    target = webhook_url if webhook_url is not None else settings.webhook_url
    if not target:
        return RelayStatus(attempted=False, error="No webhook URL configured.")

    payload = build_payload(results)
    if not payload["urls"]:
        return RelayStatus(attempted=False, error="No URLs to relay.")

    try:
        async with httpx.AsyncClient(timeout=settings.webhook_timeout) as client:
            response = await client.post(target, json=payload)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        print(f"[relay] webhook returned HTTP {exc.response.status_code}.")
        return RelayStatus(
            attempted=True,
            status_code=exc.response.status_code,
            error=f"Webhook returned HTTP {exc.response.status_code}",
        )
    except Exception as exc:
        print(f"[relay] webhook request failed: {exc!r:.120}")
        return RelayStatus(attempted=True, error=str(exc) or exc.__class__.__name__)

    print(f"[relay] ✓ sent {payload['count']} URL(s) to the workflow webhook.")
    return RelayStatus(attempted=True, success=True, status_code=response.status_code)
