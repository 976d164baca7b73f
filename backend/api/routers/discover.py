"""Discovery endpoint.

Routes
------
POST /discover    Body: {"urls": ["example.com", ...], "include_metadata": false, "relay": true}
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from backend.config import settings
from backend.discovery.models import RelayStatus
from backend.discovery.orchestrator import discover_sites, summarize
from backend.discovery.relay import relay_results
from backend.discovery.urls import is_valid_url, normalize_input_url

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class DiscoverRequest(BaseModel):
    urls: list[str]
    include_metadata: bool = False
    relay: bool = True


class DiscoverResponse(BaseModel):
    message: str
    summary: dict[str, int]
    results: list[dict[str, Any]]
    relay: dict[str, Any]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _validated_urls(raw_urls: list[str]) -> list[str]:
    """Normalise every entry and reject the request if any is unusable."""
    if not raw_urls:
        raise HTTPException(status_code=400, detail="Please provide at least one URL.")
    if len(raw_urls) > settings.max_urls_per_request:
        raise HTTPException(
            status_code=400,
            detail=f"Too many URLs: at most {settings.max_urls_per_request} per request.",
        )

    urls = [normalize_input_url(u) for u in raw_urls]
    invalid = [raw for raw, url in zip(raw_urls, urls) if not url or not is_valid_url(url)]
    if invalid:
        raise HTTPException(
            status_code=400,
            detail={"message": "Invalid URLs provided.", "invalidUrls": invalid},
        )
    return urls


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@router.post("", response_model=DiscoverResponse)
async def discover(body: DiscoverRequest) -> dict[str, Any]:
    """Discover article URLs for every site in the request.

    Per-site failures are reported in-band (``status="failed"``); only input
    validation produces an HTTP error.
    """
    urls = _validated_urls(body.urls)
    results = await discover_sites(urls, include_metadata=body.include_metadata)
    summary = summarize(results)

    if body.relay:
        relay = await relay_results(results)
    else:
        relay = RelayStatus(attempted=False, error="Relay not requested.")

    return {
        "message": f"Processed {summary.total_urls} URL(s)",
        "summary": summary.to_dict(),
        "results": [r.to_dict() for r in results],
        "relay": relay.to_dict(),
    }
