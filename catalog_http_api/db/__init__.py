"""
catalog_http_api.db
===================

Database package for the Catalog HTTP API.

    from catalog_http_api.db import Base, build_engine, get_db
"""

from .models import Base, Product, Role, User
from .session import build_engine, build_session_factory, db_session, get_db

__all__ = [
    "Base",
    "Product",
    "Role",
    "User",
    "build_engine",
    "build_session_factory",
    "db_session",
    "get_db",
]
