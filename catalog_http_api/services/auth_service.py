# catalog_http_api/services/auth_service.py

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from catalog_http_api.db.models import Role, User
from catalog_http_api.errors import ConflictError, ForbiddenError, NotFoundError, UnauthenticatedError
from catalog_http_api.logging import get_logger
from catalog_http_api.repositories.users import UsersRepository
from catalog_http_api.schemas.auth import AuthResponse, UserRead
from catalog_http_api.security.passwords import PasswordHasher
from catalog_http_api.security.tokens import Clock, TokenCodec, utcnow

logger = get_logger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class AuthService:
    """
    Login, registration and identity management.

    Responsibilities:
    - Verify credentials against stored bcrypt hashes.
    - Create identities (always with role USER) and issue tokens.
    - Administrative lookups, role changes and deletion.
    """

    def __init__(
        self,
        repo: UsersRepository,
        codec: TokenCodec,
        hasher: PasswordHasher,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._repo = repo
        self._codec = codec
        self._hasher = hasher
        self._clock = clock

    def _auth_response(self, user: User) -> AuthResponse:
        token = self._codec.issue(user.email, user.id, user.role)
        return AuthResponse(
            token=token,
            user_id=user.id,
            email=user.email,
            role=user.role,
        )

    def _require(self, user_id: int) -> User:
        user = self._repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User with id={user_id} not found.")
        return user

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def login(self, email: str, password: str) -> AuthResponse:
        """
        Issue a token for valid credentials.

        Unknown emails and wrong passwords fail identically.
        """
        user = self._repo.get_by_email(email)
        if user is None:
            self._hasher.burn(password)
            logger.warning("login_failed", email=email, reason="unknown_email")
            raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE)

        if not self._hasher.verify(password, user.password_hash):
            logger.warning("login_failed", email=email, reason="bad_password")
            raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE)

        logger.info("login_succeeded", user_id=user.id)
        return self._auth_response(user)

    def register(self, email: str, password: str) -> AuthResponse:
        """
        Create a USER identity and issue its first token.
        """
        if self._repo.exists_by_email(email):
            logger.warning("registration_rejected", email=email, reason="email_exists")
            raise ConflictError("User with this email already exists")

        password_hash = self._hasher.hash(password)
        try:
            user = self._repo.create(
                email=email,
                password_hash=password_hash,
                role=Role.USER,
                created_at=self._clock(),
            )
            self._repo.session.commit()
        except IntegrityError:
            # Another request registered the same email in between.
            self._repo.session.rollback()
            raise ConflictError("User with this email already exists") from None

        logger.info("user_registered", user_id=user.id)
        return self._auth_response(user)

    # -------------------------------------------------------------------------
    # Identity management
    # -------------------------------------------------------------------------

    def list_users(self) -> List[UserRead]:
        return [UserRead.model_validate(u) for u in self._repo.list_users()]

    def get_user(self, user_id: int) -> UserRead:
        return UserRead.model_validate(self._require(user_id))

    def get_user_by_email(self, email: str) -> UserRead:
        user = self._repo.get_by_email(email)
        if user is None:
            raise NotFoundError(f"User with email '{email}' not found.")
        return UserRead.model_validate(user)

    def users_by_role(self, role: Role) -> List[UserRead]:
        return [UserRead.model_validate(u) for u in self._repo.list_by_role(role)]

    def count_by_role(self, role: Role) -> int:
        return self._repo.count_by_role(role)

    def update_role(self, user_id: int, role: Role) -> UserRead:
        user = self._require(user_id)
        self._repo.set_role(user, role)
        self._repo.session.commit()
        logger.info("user_role_updated", user_id=user_id, role=role.value)
        return UserRead.model_validate(user)

    def delete_user(self, user_id: int, acting_user_id: Optional[int] = None) -> None:
        """
        Permanently delete an identity. An administrator cannot delete the
        identity they are authenticated as.
        """
        user = self._require(user_id)
        if acting_user_id is not None and acting_user_id == user_id:
            raise ForbiddenError("You cannot delete your own account")
        self._repo.delete(user)
        self._repo.session.commit()
        logger.info("user_deleted", user_id=user_id)


__all__ = ["AuthService", "INVALID_CREDENTIALS_MESSAGE"]
