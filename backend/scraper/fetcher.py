"""Fetch orchestrator: obtain the raw image-results page for a query.

Strategy chain (fixed, no retries):
  1. Race — a direct request to the search endpoint with browser headers and
     a passthrough relay request run concurrently; the first success wins
     and the loser is cancelled.
  2. Fallback — only if both racers fail, the JSON-envelope relay is asked
     for the same page and its ``contents`` field is unwrapped.

Every attempt runs under its own ``asyncio.wait_for`` deadline, so a timeout
cancels that attempt only.  Attempt failures are recorded on a
:class:`FetchAttempt` and never raised; only exhaustion of the whole chain
raises :class:`UpstreamExhaustedError`.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Iterable, Optional
from urllib.parse import quote

import httpx

from backend.config import settings
from backend.scraper.errors import UpstreamExhaustedError
from backend.scraper.models import FetchAttempt

# Characters encodeURIComponent leaves alone, beyond quote()'s defaults.
_QUERY_SAFE = "!~*'()"


def _log(message: str) -> None:
    if settings.verbose:
        print(f"[fetch] {message}")


# ---------------------------------------------------------------------------
# Target construction
# ---------------------------------------------------------------------------

def build_search_url(query: str) -> str:
    """Return the canonical image-search URL for *query*.

    Parameter order is fixed so the same query always yields the same URL.
    """
    params = [
        ("q", query),
        ("form", settings.search_form),
        ("adlt", settings.search_safe),
        ("setlang", settings.search_locale),
        ("mkt", settings.search_locale),
    ]
    encoded = "&".join(f"{k}={quote(v, safe=_QUERY_SAFE)}" for k, v in params)
    return f"{settings.search_base_url}?{encoded}"


def build_relay_urls(search_url: str) -> tuple[str, str]:
    """Return ``(passthrough_url, json_envelope_url)`` relaying *search_url*."""
    target = quote(search_url, safe=_QUERY_SAFE)
    return (
        f"{settings.relay_raw_url}?url={target}",
        f"{settings.relay_json_url}?url={target}",
    )


def browser_headers() -> dict[str, str]:
    """Headers that make the direct request look like a desktop browser."""
    return {
        "User-Agent": settings.browser_user_agent,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": f"{settings.search_locale},{settings.search_locale.split('-')[0]};q=0.9",
    }


# ---------------------------------------------------------------------------
# Single attempt
# ---------------------------------------------------------------------------

def _unwrap_envelope(response: httpx.Response, field: str) -> str:
    """Return the HTML string stored under *field* of a JSON relay response.

    Raises:
        ValueError: If the body is not JSON or the field is missing/empty.
    """
    data = response.json()
    content = data.get(field) if isinstance(data, dict) else None
    if not isinstance(content, str) or not content:
        raise ValueError(f"envelope field {field!r} missing or empty")
    return content


async def fetch_attempt(
    client: httpx.AsyncClient,
    name: str,
    url: str,
    timeout: float,
    *,
    headers: Optional[dict[str, str]] = None,
    envelope_field: Optional[str] = None,
) -> FetchAttempt:
    """Issue one GET under an independent *timeout* and report its outcome.

    Never raises for network, status, timeout, or envelope problems; the
    failure is described on the returned :class:`FetchAttempt` instead.
    """
    try:
        response = await asyncio.wait_for(client.get(url, headers=headers), timeout=timeout)
        if not response.is_success:
            _log(f"{name}: HTTP {response.status_code}")
            return FetchAttempt(name, url, "error", detail=f"HTTP {response.status_code}")
        if envelope_field is None:
            content = response.text
            if not content:
                _log(f"{name}: empty body")
                return FetchAttempt(name, url, "error", detail="empty body")
        else:
            content = _unwrap_envelope(response, envelope_field)
    except (asyncio.TimeoutError, httpx.TimeoutException):
        _log(f"{name}: timed out after {timeout:.1f}s")
        return FetchAttempt(name, url, "timeout", detail=f"exceeded {timeout:.1f}s")
    except (httpx.HTTPError, ValueError) as exc:
        _log(f"{name}: failed: {exc!r:.120}")
        return FetchAttempt(name, url, "error", detail=repr(exc))

    _log(f"{name}: ✓ {len(content)} chars")
    return FetchAttempt(name, url, "ok", content=content)


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------

async def first_success(
    attempts: Iterable[Awaitable[FetchAttempt]],
) -> tuple[Optional[FetchAttempt], list[FetchAttempt]]:
    """Run *attempts* concurrently and return the first successful one.

    Returns ``(winner, finished)`` where *finished* lists every attempt that
    completed before the race was decided, in completion order.  Attempts
    still in flight once a winner is known are cancelled.
    """
    tasks = [asyncio.ensure_future(a) for a in attempts]
    pending = set(tasks)
    finished: list[FetchAttempt] = []
    winner: Optional[FetchAttempt] = None
    try:
        while pending and winner is None:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in (t for t in tasks if t in done):
                attempt = task.result()
                finished.append(attempt)
                if winner is None and attempt.ok:
                    winner = attempt
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
    return winner, finished


@asynccontextmanager
async def _client_scope(client: Optional[httpx.AsyncClient]) -> AsyncIterator[httpx.AsyncClient]:
    """Yield *client* untouched, or a fresh one that is closed afterwards."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(
        timeout=settings.total_timeout,
        follow_redirects=True,
    ) as owned:
        yield owned


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def fetch_raw_content(query: str, client: Optional[httpx.AsyncClient] = None) -> str:
    """Return the raw image-results page for *query*.

    At most three requests are issued: two raced in phase 1 and one in the
    phase 2 fallback.

    Raises:
        UpstreamExhaustedError: If every strategy failed or timed out.
    """
    search_url = build_search_url(query)
    raw_url, json_url = build_relay_urls(search_url)

    async with _client_scope(client) as http:
        winner, attempts = await first_success([
            fetch_attempt(
                http, "direct", search_url, settings.direct_timeout,
                headers=browser_headers(),
            ),
            fetch_attempt(http, "relay-raw", raw_url, settings.relay_raw_timeout),
        ])

        if winner is None:
            _log("race lost on both strategies; trying JSON relay")
            fallback = await fetch_attempt(
                http, "relay-json", json_url, settings.relay_json_timeout,
                envelope_field=settings.relay_json_field,
            )
            attempts.append(fallback)
            if fallback.ok:
                winner = fallback

    if winner is None or winner.content is None:
        _log("all upstream strategies exhausted")
        raise UpstreamExhaustedError(query=query, attempts=attempts)
    return winner.content
