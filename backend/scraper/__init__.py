"""Scraper package — image-results fetch & image URL extraction."""

from backend.scraper.errors import (
    ImageSearchError,
    InvalidQueryError,
    UpstreamExhaustedError,
)
from backend.scraper.extractor import extract_image_url
from backend.scraper.fetcher import fetch_raw_content
from backend.scraper.models import FetchAttempt, ImageResult
from backend.scraper.resolver import resolve_image, resolve_image_sync

__all__ = [
    "resolve_image",
    "resolve_image_sync",
    "fetch_raw_content",
    "extract_image_url",
    "FetchAttempt",
    "ImageResult",
    "ImageSearchError",
    "InvalidQueryError",
    "UpstreamExhaustedError",
]
