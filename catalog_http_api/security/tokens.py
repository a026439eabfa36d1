# catalog_http_api/security/tokens.py

"""
Signed, time-bounded session tokens (JWT, HS256 by default).

A token carries:

- ``sub``: the identity's email
- ``userId``: the identity's primary key
- ``role``: "USER" or "ADMIN"
- ``iat`` / ``exp``: issue and expiry instants (seconds since epoch)

Nothing is stored server-side; a token is valid iff its signature verifies
against the current key and the clock has not reached ``exp``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict

import jwt

from catalog_http_api.db.models import Role

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenInvalid(TokenError):
    """Bad signature, malformed structure or missing claims."""


class TokenExpired(TokenError):
    """Signature is fine but the token's expiry has passed."""


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    user_id: int
    role: Role
    issued_at: datetime
    expires_at: datetime


class TokenCodec:
    """
    Issues and verifies tokens with a process-wide symmetric key.

    The key and lifetime are fixed at construction; ``clock`` is injectable
    so expiry can be tested without sleeping.
    """

    def __init__(
        self,
        secret: str,
        *,
        lifetime: timedelta = timedelta(hours=24),
        algorithm: str = "HS256",
        clock: Clock = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._lifetime = lifetime
        self._algorithm = algorithm
        self._clock = clock

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def issue(self, subject: str, user_id: int, role: Role) -> str:
        issued_at = self._clock().replace(microsecond=0)
        payload: Dict[str, Any] = {
            "sub": subject,
            "userId": user_id,
            "role": Role(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # Expiry is checked below against our own clock.
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(str(exc)) from exc

        try:
            claims = TokenClaims(
                subject=str(payload["sub"]),
                user_id=int(payload["userId"]),
                role=Role(payload["role"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenInvalid(f"Malformed claims: {exc}") from exc

        if self._clock() >= claims.expires_at:
            raise TokenExpired(f"Token expired at {claims.expires_at.isoformat()}")
        return claims


__all__ = [
    "Clock",
    "TokenClaims",
    "TokenCodec",
    "TokenError",
    "TokenExpired",
    "TokenInvalid",
    "utcnow",
]
