# catalog_http_api/security/access_filter.py

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from catalog_http_api.errors import ServiceError, UnauthenticatedError, error_response
from catalog_http_api.logging import get_logger

from .policy import AuthorizationPolicy, Principal
from .tokens import TokenCodec, TokenExpired, TokenInvalid

logger = get_logger(__name__)

BEARER_PREFIX = "bearer "
INVALID_TOKEN_MESSAGE = "Invalid or expired token"


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Return the token from an ``Authorization: Bearer <token>`` header, or
    ``None`` when the header is absent or not a bearer credential.
    """
    if not authorization:
        return None
    value = authorization.strip()
    if not value.lower().startswith(BEARER_PREFIX):
        return None
    token = value[len(BEARER_PREFIX):].strip()
    return token or None


class AccessFilterMiddleware(BaseHTTPMiddleware):
    """
    Authenticates every request from its bearer token and enforces the
    authorization policy before the request reaches a router.

    On success the verified identity is available to handlers as
    ``request.state.principal`` (``None`` on public routes without a token).
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        codec: TokenCodec,
        policy: AuthorizationPolicy,
        api_root: str = "",
    ) -> None:
        super().__init__(app)
        self._codec = codec
        self._policy = policy
        self._api_root = api_root

    def _relative_path(self, path: str) -> str:
        if self._api_root and (path == self._api_root or path.startswith(self._api_root + "/")):
            return path[len(self._api_root):]
        return path

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        method = request.method
        path = self._relative_path(request.url.path)
        request.state.principal = None

        try:
            principal = self._authenticate(request, method, path)
            request.state.principal = principal
            self._policy.check(method, path, principal)
        except ServiceError as exc:
            logger.warning("access_denied", status_code=exc.status_code, reason=exc.message)
            headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
            return error_response(exc.status_code, exc.error, exc.message, request.url.path, headers=headers)

        return await call_next(request)

    def _authenticate(self, request: Request, method: str, path: str) -> Optional[Principal]:
        token = extract_bearer_token(request.headers.get("Authorization"))
        if token is None:
            return None

        try:
            claims = self._codec.verify(token)
        except TokenExpired as exc:
            logger.info("token_expired", detail=str(exc))
            return self._reject_bad_token(method, path)
        except TokenInvalid as exc:
            logger.warning("token_invalid", detail=str(exc))
            return self._reject_bad_token(method, path)

        structlog.contextvars.bind_contextvars(user_id=claims.user_id)
        return Principal(subject=claims.subject, user_id=claims.user_id, role=claims.role)

    def _reject_bad_token(self, method: str, path: str) -> None:
        # A stale token must not block login or registration.
        if self._policy.is_public(method, path):
            return None
        raise UnauthenticatedError(INVALID_TOKEN_MESSAGE)


def get_principal(request: Request) -> Principal:
    """
    FastAPI dependency returning the authenticated identity.
    """
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise UnauthenticatedError("Full authentication is required to access this resource")
    return principal


__all__ = [
    "AccessFilterMiddleware",
    "INVALID_TOKEN_MESSAGE",
    "extract_bearer_token",
    "get_principal",
]
