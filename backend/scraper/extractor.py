"""Image URL extraction: turns a raw results page into at most one image URL.

Two passes are tried in order and the first non-empty answer wins:

* :func:`extract_fast` — a regex scan for the serialized ``murl`` / ``turl``
  metadata fields anywhere in the raw text.  Cheap, but blind to attribute
  encodings such as ``&quot;``.
* :func:`extract_structural` — a BeautifulSoup walk over the parsed page.

Nothing here checks that the URL is reachable or actually an image.
"""

from __future__ import annotations

import json
import re
from typing import Callable, Optional

from bs4 import BeautifulSoup

from backend.config import settings

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# A JSON string value starting with "http"; backslash escapes are allowed
# inside and undone by normalize_escapes().
_FIELD_PATTERNS = [
    re.compile(r'"murl"\s*:\s*"(http(?:[^"\\]|\\.)+)"'),
    re.compile(r'"turl"\s*:\s*"(http(?:[^"\\]|\\.)+)"'),
]

_ABSOLUTE_OR_PROTOCOL_RELATIVE = re.compile(r"^(https?:)?//", re.IGNORECASE)

_METADATA_ATTR = "m"
_RESULT_CONTAINER = ".iusc[m]"
_MAIN_IMAGE = "img.mimg"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def normalize_escapes(url: str) -> str:
    """Undo the escaping the upstream applies to URLs embedded in its markup."""
    return (
        url.replace("\\/", "/")
        .replace("\\u0026", "&")
        .replace("&amp;", "&")
    )


def _http_field(meta: dict, key: str) -> Optional[str]:
    value = meta.get(key)
    if isinstance(value, str) and value.startswith("http"):
        return value
    return None


def _from_metadata(soup: BeautifulSoup) -> Optional[str]:
    """Return ``murl`` (else ``turl``) from the first usable ``m`` attribute.

    Known result containers are checked before any other element carrying the
    attribute.  An attribute that is not a JSON object is skipped.
    """
    candidates = soup.select(_RESULT_CONTAINER)
    seen = {id(el) for el in candidates}
    candidates += [el for el in soup.find_all(attrs={_METADATA_ATTR: True}) if id(el) not in seen]

    for el in candidates:
        try:
            meta = json.loads(el.get(_METADATA_ATTR) or "")
        except ValueError:
            continue
        if not isinstance(meta, dict):
            continue
        url = _http_field(meta, "murl") or _http_field(meta, "turl")
        if url:
            return url
    return None


def _from_main_image(soup: BeautifulSoup) -> Optional[str]:
    img = soup.select_one(_MAIN_IMAGE)
    src = img.get("src") if img else None
    if isinstance(src, str) and src.startswith("http"):
        return src
    return None


def _from_any_image(soup: BeautifulSoup) -> Optional[str]:
    """Return the first absolute or protocol-relative ``src``/``data-src``."""
    for img in soup.find_all("img"):
        for attr in ("src", "data-src"):
            src = (img.get(attr) or "").strip()
            if _ABSOLUTE_OR_PROTOCOL_RELATIVE.match(src):
                return f"https:{src}" if src.startswith("//") else src
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_fast(content: str) -> Optional[str]:
    """Regex pass: first ``murl`` match, else first ``turl`` match, unescaped."""
    for pattern in _FIELD_PATTERNS:
        match = pattern.search(content)
        if match:
            return normalize_escapes(match.group(1))
    return None


def extract_structural(content: str) -> Optional[str]:
    """DOM pass: metadata attribute, then the main image, then any image."""
    soup = BeautifulSoup(content, "html.parser")
    return _from_metadata(soup) or _from_main_image(soup) or _from_any_image(soup)


EXTRACTION_STRATEGIES: tuple[Callable[[str], Optional[str]], ...] = (
    extract_fast,
    extract_structural,
)


def extract_image_url(content: str) -> Optional[str]:
    """Return the first image URL found in *content*, or ``None``."""
    for strategy in EXTRACTION_STRATEGIES:
        url = strategy(content)
        if url:
            if settings.verbose:
                print(f"[extract] {strategy.__name__} matched")
            return url
    return None
