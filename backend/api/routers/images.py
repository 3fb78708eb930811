"""Image search endpoint.

Routes
------
GET /api/search-images?q=<query>   → {"imageUrl": "https://..." | null}

Only three outcomes are visible to clients: a URL, ``null`` (nothing found),
or a generic error body.  Upstream details never leak into the response.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend.config import settings
from backend.scraper import ImageSearchError, InvalidQueryError, resolve_image

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class ImageResponse(BaseModel):
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class ErrorResponse(BaseModel):
    error: str


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=ImageResponse,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def search_images(q: Optional[str] = None):
    """Resolve *q* to the first plausible image URL on the results page."""
    try:
        result = await resolve_image(q)
    except InvalidQueryError:
        return JSONResponse(status_code=400, content={"error": "Query parameter is required"})
    except ImageSearchError as exc:
        if settings.verbose:
            print(f"[search-images] {exc}")
        return JSONResponse(status_code=500, content={"error": "Failed to search images"})
    except Exception as exc:
        if settings.verbose:
            print(f"[search-images] unexpected error: {exc!r}")
        return JSONResponse(status_code=500, content={"error": "Failed to search images"})
    return result.to_dict()
