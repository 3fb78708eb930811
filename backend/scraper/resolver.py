"""Query → image URL pipeline: validate, fetch, extract."""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from backend.config import settings
from backend.scraper.errors import InvalidQueryError
from backend.scraper.extractor import extract_image_url
from backend.scraper.fetcher import fetch_raw_content
from backend.scraper.models import ImageResult


def _validate_query(query: Optional[str]) -> str:
    if query is None or not query.strip():
        raise InvalidQueryError("Query parameter is required", query=query)
    return query.strip()


async def resolve_image(
    query: Optional[str],
    client: Optional[httpx.AsyncClient] = None,
) -> ImageResult:
    """Resolve *query* to a single representative image URL.

    A page with no recognisable image is not an error: the returned
    :class:`ImageResult` simply has ``image_url=None``.

    Raises:
        InvalidQueryError: If *query* is missing or blank (no request is made).
        UpstreamExhaustedError: If no fetch strategy produced a page.
    """
    q = _validate_query(query)
    content = await fetch_raw_content(q, client=client)
    url = extract_image_url(content)
    if settings.verbose and url is None:
        print(f"[resolve] no image found for {q!r}")
    return ImageResult(query=q, image_url=url)


def resolve_image_sync(query: Optional[str]) -> ImageResult:
    """Blocking wrapper around :func:`resolve_image` for the CLI."""
    return asyncio.run(resolve_image(query))
