"""Centralised settings for the image resolver backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/125.0.0.0 Safari/537.36"
)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() not in ("0", "false", "no", "off")


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Canonical search endpoint
    # ------------------------------------------------------------------
    search_base_url: str = field(
        default_factory=lambda: os.environ.get(
            "IMAGE_SEARCH_URL", "https://www.bing.com/images/search"
        )
    )
    search_form: str = field(
        default_factory=lambda: os.environ.get("IMAGE_SEARCH_FORM", "HDRSC2")
    )
    search_safe: str = field(
        default_factory=lambda: os.environ.get("IMAGE_SEARCH_SAFE", "strict")
    )
    search_locale: str = field(
        default_factory=lambda: os.environ.get("IMAGE_SEARCH_LOCALE", "en-US")
    )
    browser_user_agent: str = field(
        default_factory=lambda: os.environ.get("BROWSER_USER_AGENT", _DEFAULT_UA)
    )

    # ------------------------------------------------------------------
    # Relays
    # ------------------------------------------------------------------
    relay_raw_url: str = field(
        default_factory=lambda: os.environ.get(
            "RELAY_RAW_URL", "https://api.allorigins.win/raw"
        )
    )
    relay_json_url: str = field(
        default_factory=lambda: os.environ.get(
            "RELAY_JSON_URL", "https://api.allorigins.win/get"
        )
    )
    relay_json_field: str = field(
        default_factory=lambda: os.environ.get("RELAY_JSON_FIELD", "contents")
    )

    # ------------------------------------------------------------------
    # Per-attempt timeouts (seconds)
    # ------------------------------------------------------------------
    direct_timeout: float = field(
        default_factory=lambda: float(os.environ.get("DIRECT_TIMEOUT", "3.5"))
    )
    relay_raw_timeout: float = field(
        default_factory=lambda: float(os.environ.get("RELAY_RAW_TIMEOUT", "5.0"))
    )
    relay_json_timeout: float = field(
        default_factory=lambda: float(os.environ.get("RELAY_JSON_TIMEOUT", "5.0"))
    )

    # ------------------------------------------------------------------
    # HTTP API / CLI
    # ------------------------------------------------------------------
    api_host: str = field(
        default_factory=lambda: os.environ.get("API_HOST", "127.0.0.1")
    )
    api_port: int = field(
        default_factory=lambda: int(os.environ.get("API_PORT", "8000"))
    )
    verbose: bool = field(
        default_factory=lambda: _env_flag("IMAGE_SEARCH_VERBOSE", "1")
    )

    @property
    def total_timeout(self) -> float:
        """Upper bound on a full resolution: phase 1 race plus phase 2 fallback."""
        return max(self.direct_timeout, self.relay_raw_timeout) + self.relay_json_timeout


# Module-level singleton — import this everywhere:
#   from backend.config import settings
settings = Settings()
