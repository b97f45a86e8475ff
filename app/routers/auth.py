# app/routers/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from app.database import get_session
from app.schemas.user import TokenRead, UserLogin, UserRead, UserRegister
from app.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])


def get_user_service(request: Request) -> UserService:
    """The service is built once in the app lifespan."""
    return request.app.state.user_service


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(
    payload: UserRegister,
    session: Session = Depends(get_session),
    service: UserService = Depends(get_user_service),
):
    """
    Create an account (Supabase Auth) and its shop profile.

    Errors:
      - 409 if the email is already registered
      - 400 if Supabase rejects the password
    """
    return service.register(session, payload)


@router.post("/login", response_model=TokenRead)
def login(
    payload: UserLogin,
    session: Session = Depends(get_session),
    service: UserService = Depends(get_user_service),
):
    """
    Password sign-in.

    Returns the Supabase access token to send as `Authorization: Bearer`.
    """
    return service.login(session, payload)
