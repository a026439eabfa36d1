# catalog_http_api/routers/auth.py

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from catalog_http_api.db.models import Role
from catalog_http_api.db.session import get_db
from catalog_http_api.repositories.users import UsersRepository
from catalog_http_api.schemas.auth import AuthRequest, AuthResponse, UserRead
from catalog_http_api.schemas.common import ERROR_RESPONSES
from catalog_http_api.security.access_filter import get_principal
from catalog_http_api.security.policy import Principal
from catalog_http_api.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"], responses=ERROR_RESPONSES)


def get_auth_service(request: Request, session: Session = Depends(get_db)) -> AuthService:
    """
    Dependency-injected factory for AuthService.

    The token codec and password hasher are process-wide and live on
    ``app.state``; the repository is bound to the request's session.
    """
    return AuthService(
        UsersRepository(session),
        request.app.state.token_codec,
        request.app.state.password_hasher,
    )


# ---------------------------------------------------------------------------
# Login / registration (public)
# ---------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="User login",
    description="Authenticate with email and password and receive a bearer token.",
)
def login(
    *,
    payload: AuthRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    return service.login(payload.email, payload.password)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="User registration",
    description="Create a USER account and receive a bearer token.",
)
def register(
    *,
    payload: AuthRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    return service.register(payload.email, payload.password)


# ---------------------------------------------------------------------------
# Identity management (ADMIN, enforced by the access policy)
# ---------------------------------------------------------------------------


@router.get("/users", response_model=List[UserRead], summary="List all users")
def list_users(*, service: AuthService = Depends(get_auth_service)) -> List[UserRead]:
    return service.list_users()


@router.get("/users/email/{email}", response_model=UserRead, summary="Get user by email")
def get_user_by_email(
    *,
    email: str,
    service: AuthService = Depends(get_auth_service),
) -> UserRead:
    return service.get_user_by_email(email)


@router.get("/users/role/{role}", response_model=List[UserRead], summary="List users by role")
def list_users_by_role(
    *,
    role: Role,
    service: AuthService = Depends(get_auth_service),
) -> List[UserRead]:
    return service.users_by_role(role)


@router.get("/users/count/{role}", response_model=int, summary="Count users by role")
def count_users_by_role(
    *,
    role: Role,
    service: AuthService = Depends(get_auth_service),
) -> int:
    return service.count_by_role(role)


@router.get("/users/{user_id}", response_model=UserRead, summary="Get user by id")
def get_user(
    *,
    user_id: int,
    service: AuthService = Depends(get_auth_service),
) -> UserRead:
    return service.get_user(user_id)


@router.put("/users/{user_id}/role", response_model=UserRead, summary="Change a user's role")
def update_user_role(
    *,
    user_id: int,
    role: Role = Query(..., description="New role: USER or ADMIN."),
    service: AuthService = Depends(get_auth_service),
) -> UserRead:
    return service.update_role(user_id, role)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    description="Permanently delete an identity. Administrators cannot delete themselves.",
)
def delete_user(
    *,
    user_id: int,
    principal: Principal = Depends(get_principal),
    service: AuthService = Depends(get_auth_service),
) -> None:
    service.delete_user(user_id, acting_user_id=principal.user_id)
