"""
catalog_http_api.security
-------------------------

Token codec, password hashing, the route policy table and the access
filter that ties them together.
"""

from .access_filter import AccessFilterMiddleware, extract_bearer_token, get_principal
from .passwords import PasswordHasher
from .policy import AccessRule, AuthorizationPolicy, DEFAULT_RULES, Principal
from .tokens import TokenClaims, TokenCodec, TokenExpired, TokenInvalid

__all__ = [
    "AccessFilterMiddleware",
    "AccessRule",
    "AuthorizationPolicy",
    "DEFAULT_RULES",
    "PasswordHasher",
    "Principal",
    "TokenClaims",
    "TokenCodec",
    "TokenExpired",
    "TokenInvalid",
    "extract_bearer_token",
    "get_principal",
]
