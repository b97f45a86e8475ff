# app/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_auth, require_admin
from app.database import get_session
from app.models.user import User
from app.routers.auth import get_user_service
from app.schemas.user import UserRead, UserUpdate, UserRoleUpdate
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


# -------- Self profile --------


@router.get("/me", response_model=UserRead)
def read_me(
    current_user: User = Depends(require_auth),
    service: UserService = Depends(get_user_service),
):
    """
    Return the authenticated user's profile.

    Auth:
      - Requires valid Supabase JWT.
    """
    return service.get_me(current_user)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    service: UserService = Depends(get_user_service),
):
    """
    Update the authenticated user's profile (partial update).

    Currently, only `name` is editable.
    """
    return service.update_me(session, current_user, payload)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    skip: int = 0,
    limit: int = 50,
    session: Session = Depends(get_session),
    service: UserService = Depends(get_user_service),
):
    """
    List all users (admin only).

    Pagination via skip/limit.
    """
    return service.list_users(session, skip, limit)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def get_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
    service: UserService = Depends(get_user_service),
):
    """Get a specific user by id (admin only)."""
    return service.get_user(session, user_id)


@router.patch(
    "/{user_id}/role",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
    service: UserService = Depends(get_user_service),
):
    """
    Update a user's role (admin only).

    Allowed roles: user, admin.
    Guests are anonymous and don't have rows.
    """
    return service.update_role(session, user_id, payload)
