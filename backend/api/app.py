"""FastAPI application factory.

Routers
-------
    /api/search-images  — resolve a query to a single image URL
    /health             — liveness probe
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api.routers import images as images_router


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Image Resolver API",
        description=(
            "Resolves a free-text query to one representative image URL by "
            "scraping an image-results page through redundant fetch strategies."
        ),
        version="0.1.0",
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(images_router.router, prefix="/api/search-images", tags=["images"])

    @app.get("/health", tags=["meta"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


# Module-level instance used by uvicorn:
#   uvicorn backend.api.app:app --reload
app = create_app()
