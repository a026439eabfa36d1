# catalog_http_api/security/passwords.py

from __future__ import annotations

import bcrypt

from catalog_http_api.errors import ValidationError

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    Salted bcrypt hashing with constant-time verification.
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds
        # Compared against when the account does not exist, so a login for an
        # unknown email costs the same as one with a wrong password.
        self._dummy_hash = self.hash("dummy-password-for-timing")

    def hash(self, password: str) -> str:
        raw = password.encode("utf-8")
        if len(raw) > MAX_PASSWORD_BYTES:
            raise ValidationError(errors={"password": f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes"})
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self._rounds)).decode("ascii")

    def verify(self, password: str, password_hash: str) -> bool:
        raw = password.encode("utf-8")
        if len(raw) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(raw, password_hash.encode("ascii"))
        except ValueError:
            # Malformed stored hash.
            return False

    def burn(self, password: str) -> None:
        """Run a verification against a throwaway hash and discard the result."""
        self.verify(password, self._dummy_hash)


__all__ = ["MAX_PASSWORD_BYTES", "PasswordHasher"]
