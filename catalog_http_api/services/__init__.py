"""
catalog_http_api.services
-------------------------

Service layer aggregation for the Catalog HTTP API.

Routers import service classes from this package instead of depending
directly on repositories.

    from catalog_http_api.services import AuthService, CatalogService
"""

from .auth_service import AuthService
from .catalog_service import CatalogService

__all__ = [
    "AuthService",
    "CatalogService",
]
