"""
catalog_http_api/schemas/auth.py

Pydantic models for authentication and identity management.
"""

from __future__ import annotations

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from catalog_http_api.db.models import Role

from .common import APIModel, UtcDatetime


class AuthRequest(APIModel):
    """
    Credentials for login and registration.
    """

    email: EmailStr = Field(..., description="Login name of the identity.")
    password: str = Field(..., description="Plaintext password; never stored or logged.")

    @field_validator("password")
    @classmethod
    def _password_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Password is required")
        return value


class AuthResponse(APIModel):
    """
    Issued token plus a summary of the identity it was issued for.
    """

    token: str
    token_type: str = "Bearer"
    user_id: int
    email: str
    role: Role
    message: Optional[str] = "Authentication successful"


class UserRead(APIModel):
    """
    Identity as exposed to administrators. The password hash is never included.
    """

    id: int
    email: str
    role: Role
    created_at: UtcDatetime


__all__ = ["AuthRequest", "AuthResponse", "UserRead"]
