"""Caller-visible failures of the image resolution pipeline.

Individual fetch attempts never raise; only an invalid query or total
exhaustion of the strategy chain reaches the caller.
"""

from __future__ import annotations

from typing import List, Optional

from backend.scraper.models import FetchAttempt


class ImageSearchError(Exception):
    """Base class for resolution errors."""

    def __init__(self, message: str, *, query: Optional[str] = None) -> None:
        super().__init__(message)
        self.query = query


class InvalidQueryError(ImageSearchError):
    """The query was missing or blank; no network call was made."""


class UpstreamExhaustedError(ImageSearchError):
    """Every fetch strategy failed or timed out."""

    def __init__(
        self,
        message: str = "All upstream strategies failed",
        *,
        query: Optional[str] = None,
        attempts: Optional[List[FetchAttempt]] = None,
    ) -> None:
        super().__init__(message, query=query)
        self.attempts = list(attempts or [])


__all__ = [
    "ImageSearchError",
    "InvalidQueryError",
    "UpstreamExhaustedError",
]
