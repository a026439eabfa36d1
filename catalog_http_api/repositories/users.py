# catalog_http_api/repositories/users.py

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from ..db import models


class UsersRepository:
    """
    Thin data-access layer around the User model.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def _base_select(self) -> Select[Any]:
        return select(models.User)

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def list_users(self) -> Sequence[models.User]:
        stmt = self._base_select().order_by(models.User.id)
        return list(self.session.execute(stmt).scalars().all())

    def get_by_id(self, user_id: int) -> Optional[models.User]:
        if not 1 <= user_id <= models.MAX_ROW_ID:
            return None
        return self.session.get(models.User, user_id)

    def get_by_email(self, email: str) -> Optional[models.User]:
        stmt = self._base_select().where(models.User.email == email)
        return self.session.execute(stmt).scalar_one_or_none()

    def exists_by_email(self, email: str) -> bool:
        stmt = select(models.User.id).where(models.User.email == email).limit(1)
        return self.session.execute(stmt).first() is not None

    def list_by_role(self, role: models.Role) -> Sequence[models.User]:
        stmt = self._base_select().where(models.User.role == role).order_by(models.User.id)
        return list(self.session.execute(stmt).scalars().all())

    def count_by_role(self, role: models.Role) -> int:
        stmt = select(func.count()).select_from(models.User).where(models.User.role == role)
        return int(self.session.execute(stmt).scalar_one())

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def create(
        self,
        *,
        email: str,
        password_hash: str,
        role: models.Role,
        created_at: datetime,
    ) -> models.User:
        user = models.User(
            email=email,
            password_hash=password_hash,
            role=role,
            created_at=created_at,
        )
        self.session.add(user)
        self.session.flush()
        return user

    def set_role(self, user: models.User, role: models.Role) -> models.User:
        user.role = role
        self.session.add(user)
        self.session.flush()
        return user

    def delete(self, user: models.User) -> None:
        self.session.delete(user)
        self.session.flush()
