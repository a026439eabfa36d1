"""
catalog_http_api
----------------

HTTP API for the Product Catalog.

This package exposes:

- ``create_app()``: application factory returning a FastAPI instance.
- ``app``: a module-level ASGI application, suitable for uvicorn /
  gunicorn entrypoints like ``catalog_http_api:app``.
"""

from importlib import metadata as _metadata


# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

try:
    __version__: str = _metadata.version("catalog-http-api")
except _metadata.PackageNotFoundError:  # When running from source tree
    __version__ = "0.0.0"


# ---------------------------------------------------------------------------
# Public application entry points
# ---------------------------------------------------------------------------

# main imports __version__ from here, so it must be defined first.
from .main import app, create_app  # noqa: E402


__all__ = [
    "__version__",
    "create_app",
    "app",
]
