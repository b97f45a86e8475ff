# app/services/user_service.py
import logging
import uuid

from sqlmodel import Session

from app.core.auth import default_name_from_email, provision_user
from app.core.errors import EmailTakenError, UserNotFoundError
from app.core.identity import SupabaseIdentity
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import (
    TokenRead,
    UserLogin,
    UserRead,
    UserRegister,
    UserRoleUpdate,
    UserUpdate,
)

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - registration and sign-in through Supabase Auth
      - keep the local profile row in step with the Supabase account
      - profile edits and admin role management
    """

    def __init__(self, repo: UserRepository, identity: SupabaseIdentity):
        self.repo = repo
        self.identity = identity

    # ----- Accounts -----

    def register(self, session: Session, payload: UserRegister) -> User:
        """
        Create the Supabase account, then the profile row.

        If the profile insert fails the account still exists; its
        profile is provisioned on the first authenticated request.

        Raises:
            EmailTakenError: if the email already has a profile or account.
        """
        email = payload.email.lower()
        if self.repo.get_by_email(session, email) is not None:
            raise EmailTakenError(email)

        user_id = self.identity.register(email, payload.password)
        user = self.repo.create(
            session,
            User(id=user_id, email=email, name=payload.name or default_name_from_email(email)),
        )
        logger.info("Created profile %s for %s", user.id, email)
        return user

    def login(self, session: Session, payload: UserLogin) -> TokenRead:
        """
        Password sign-in. Returns the Supabase access token and profile.

        Raises:
            AuthenticationError: on wrong credentials.
        """
        email = payload.email.lower()
        user_id, access_token = self.identity.sign_in(email, payload.password)
        user = provision_user(session, user_id, email)
        return TokenRead(access_token=access_token, user=UserRead.model_validate(user))

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def update_me(self, session: Session, current_user: User, payload: UserUpdate) -> User:
        """
        Partial update for profile edits.
        Currently, only `name` is editable.
        """
        if payload.name is not None:
            current_user.name = payload.name
        return self.repo.update(session, current_user)

    # ----- Admin operations -----

    def list_users(self, session: Session, skip: int, limit: int) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list_users(session, skip=max(skip, 0), limit=min(max(limit, 1), 100))

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Get a user by id (admin only).

        Raises:
            UserNotFoundError: if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def update_role(self, session: Session, user_id: uuid.UUID, payload: UserRoleUpdate) -> User:
        """
        Change user's role (admin only).

        Role validation is enforced by the schema (Literal).
        """
        user = self.get_user(session, user_id)
        user.role = payload.role
        updated = self.repo.update(session, user)
        logger.info("User %s is now %s", user_id, updated.role)
        return updated
