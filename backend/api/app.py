"""FastAPI application factory.

Routers
-------
All endpoint groups are mounted under their respective path prefix:

    /discover  — batch blog discovery (+ optional webhook relay)
    /health    — liveness probe
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api.routers import discover as discover_router


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Blog Discovery API",
        description=(
            "REST interface for the blog discovery engine. Classifies site URLs, "
            "discovers up to ten article URLs per site via feeds, sitemaps and "
            "scraping, and optionally relays them to a workflow webhook."
        ),
        version="0.1.0",
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(discover_router.router, prefix="/discover", tags=["discover"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, bool]:
        return {"ok": True}

    return app


# Module-level instance used by uvicorn:
#   uvicorn backend.api.app:app --reload
app = create_app()
