# catalog_http_api/repositories/__init__.py
"""
Repository layer public exports.

    from catalog_http_api.repositories import ProductsRepository
"""

from .products import ProductsRepository
from .users import UsersRepository

__all__ = [
    "ProductsRepository",
    "UsersRepository",
]
