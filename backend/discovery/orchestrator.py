"""Batch orchestration: run the per-site pipeline for many sites at once.

Every site gets its own asyncio task, all created up front.  A task that
raises is reported as that site's failed :class:`SiteResult`; siblings and the
aggregation step are unaffected, and the output is always index-aligned with
the input.
"""

from __future__ import annotations

import asyncio

from backend.config import settings
from backend.discovery.models import FAILED, BatchSummary, SiteResult
from backend.discovery.pipeline import discover_site


async def discover_sites(
    site_urls: list[str],
    include_metadata: bool = False,
) -> list[SiteResult]:
    """Run :func:`discover_site` concurrently for every URL in *site_urls*.

    Concurrency is capped by ``settings.max_concurrent_sites`` (0 means no
    cap).  No overall timeout is applied here; cancelling the awaiting task
    cancels every outstanding site.
    """
    limit = settings.max_concurrent_sites
    semaphore = asyncio.Semaphore(limit) if limit > 0 else None

    async def _run(url: str) -> SiteResult:
        if semaphore is None:
            return await discover_site(url, include_metadata=include_metadata)
        async with semaphore:
            return await discover_site(url, include_metadata=include_metadata)

    print(f"[batch] discovering {len(site_urls)} site(s) …")
    tasks = [asyncio.create_task(_run(url)) for url in site_urls]
    settled = await asyncio.gather(*tasks, return_exceptions=True)

    results: list[SiteResult] = []
    for url, outcome in zip(site_urls, settled):
        if isinstance(outcome, SiteResult):
            results.append(outcome)
            continue
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        print(f"[batch] ✗ {url}: {outcome!r:.200}")
        results.append(
            SiteResult(
                url=url,
                status=FAILED,
                blogs_found=0,
                duration_ms=0,
                blog_urls=[],
                method="none",
                is_direct=False,
                error=str(outcome) or outcome.__class__.__name__,
            )
        )

    summary = summarize(results)
    print(
        f"[batch] done: {summary.successful} succeeded, {summary.failed} failed, "
        f"{summary.total_blogs_found} URL(s) found."
    )
    return results


def discover_sites_sync(site_urls: list[str], include_metadata: bool = False) -> list[SiteResult]:
    """Blocking wrapper around :func:`discover_sites` for synchronous callers."""
    return asyncio.run(discover_sites(site_urls, include_metadata=include_metadata))


def summarize(results: list[SiteResult]) -> BatchSummary:
    """Count successes, failures and discovered URLs across *results*."""
    successful = sum(1 for r in results if r.ok)
    return BatchSummary(
        total_urls=len(results),
        successful=successful,
        failed=len(results) - successful,
        total_blogs_found=sum(r.blogs_found for r in results if r.ok),
    )
