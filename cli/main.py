"""Image resolver CLI — entry-point for backend operations.

Usage:
    python cli/main.py --help

Commands:
    image    → resolve a query to an image URL over the network
    extract  → run the extractor over a saved results page (offline)
    serve    → start the HTTP API with uvicorn
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from backend.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
from typing import Optional

import typer

from backend.config import settings
from backend.scraper import (
    ImageSearchError,
    InvalidQueryError,
    extract_image_url,
    resolve_image_sync,
)

app = typer.Typer(
    name="image-resolver",
    help="Resolve free-text queries to a representative image URL.",
    no_args_is_help=True,
)


@app.command("image")
def image(
    query: str = typer.Argument(..., help="Free-text search query."),
    as_json: bool = typer.Option(False, "--json", help="Print the API-shaped JSON body."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress fetch diagnostics."),
) -> None:
    """Resolve QUERY to a single image URL and print it."""
    if quiet:
        settings.verbose = False

    try:
        result = resolve_image_sync(query)
    except InvalidQueryError:
        typer.echo("[image] Query must not be blank.", err=True)
        raise typer.Exit(1)
    except ImageSearchError as exc:
        typer.echo(f"[image] Search failed: {exc}", err=True)
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(result.to_dict()))
    elif result.image_url:
        typer.echo(result.image_url)
    else:
        typer.echo("No image found.")


@app.command("extract")
def extract(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved HTML page."),
) -> None:
    """Run the image URL extractor over a saved results page."""
    content = path.read_text(encoding="utf-8", errors="replace")
    url = extract_image_url(content)
    if url is None:
        typer.echo("No image found.")
        return
    typer.echo(url)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: settings.api_host)."),
    port: Optional[int] = typer.Option(None, help="Bind port (default: settings.api_port)."),
    reload: bool = typer.Option(False, help="Auto-reload on code changes."),
) -> None:
    """Start the HTTP API."""
    import uvicorn  # noqa: PLC0415

    uvicorn.run(
        "backend.api.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
