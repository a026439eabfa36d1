"""
Top-level export module for HTTP API schemas.
"""

from .auth import AuthRequest, AuthResponse, UserRead
from .common import APIModel, ERROR_RESPONSES, ErrorResponse, Money, UtcDatetime
from .products import ProductPage, ProductRead, ProductRequest

__all__ = [
    # Common
    "APIModel", "ERROR_RESPONSES", "ErrorResponse", "Money", "UtcDatetime",
    # Auth
    "AuthRequest", "AuthResponse", "UserRead",
    # Products
    "ProductPage", "ProductRead", "ProductRequest",
]
