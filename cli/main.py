"""Blog discovery CLI — entry-point for running the engine from a terminal.

Usage:
    python cli/main.py --help

Commands:
    discover  → run the full discovery pipeline for one or more sites
    classify  → show how the URL classifier sees one or more URLs
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from backend.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
from typing import List

import typer

from backend.discovery.classifier import classify_url
from backend.discovery.orchestrator import discover_sites_sync, summarize
from backend.discovery.urls import is_valid_url, normalize_input_url

app = typer.Typer(
    name="blog-discovery",
    help="Blog discovery CLI.",
    no_args_is_help=True,
)


def _normalised(urls: List[str]) -> List[str]:
    """Normalise *urls*, exiting with code 1 if any is unusable."""
    normalised = [normalize_input_url(u) for u in urls]
    invalid = [raw for raw, url in zip(urls, normalised) if not url or not is_valid_url(url)]
    if invalid:
        typer.echo(f"❌ Invalid URL(s): {', '.join(invalid)}")
        raise typer.Exit(code=1)
    return normalised


@app.command("discover")
def discover(
    urls: List[str] = typer.Argument(..., help="Site or article URLs."),
    metadata: bool = typer.Option(False, "--metadata", help="Include title/description/date per URL."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON results."),
) -> None:
    """Discover up to ten article URLs for each site."""
    site_urls = _normalised(urls)
    results = discover_sites_sync(site_urls, include_metadata=metadata)
    summary = summarize(results)

    if as_json:
        typer.echo(
            json.dumps(
                {"summary": summary.to_dict(), "results": [r.to_dict() for r in results]},
                indent=2,
            )
        )
        return

    typer.echo("")
    for result in results:
        if result.ok:
            typer.echo(f"✅ {result.url}  [{result.method}]  {result.blogs_found} URL(s)")
            for blog_url in result.blog_urls:
                typer.echo(f"    - {blog_url}")
        else:
            typer.echo(f"❌ {result.url}  {result.error}")
    typer.echo(
        f"\n{summary.successful}/{summary.total_urls} site(s) succeeded, "
        f"{summary.total_blogs_found} URL(s) found."
    )


@app.command("classify")
def classify(
    urls: List[str] = typer.Argument(..., help="URLs to classify."),
) -> None:
    """Show whether each URL is a direct post and which rule decided it."""
    for url in urls:
        verdict = classify_url(normalize_input_url(url))
        kind = "direct post" if verdict.is_direct else "listing page"
        typer.echo(f"{verdict.url}  →  {kind}  ({verdict.rule})")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
