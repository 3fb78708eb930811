"""Data models for the image resolution pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional

Outcome = Literal["ok", "error", "timeout"]


@dataclass
class FetchAttempt:
    """The outcome of one HTTP call against one upstream target."""

    name: str
    url: str
    outcome: Outcome
    content: Optional[str] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome == "ok" and self.content is not None


@dataclass
class ImageResult:
    """A resolved query.  ``image_url`` is ``None`` when nothing was found."""

    query: str
    image_url: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.image_url is not None

    def to_dict(self) -> dict[str, Any]:
        return {"imageUrl": self.image_url}
