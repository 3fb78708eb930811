"""HTTP surface for the image resolver.

    uvicorn backend.api:app
"""

from backend.api.app import app, create_app

__all__ = ["app", "create_app"]
