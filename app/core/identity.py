# app/core/identity.py
import logging
import uuid
from typing import Callable

from supabase import AuthApiError, Client

from app.core.errors import (
    AuthenticationError,
    EmailTakenError,
    IdentityError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_EMAIL_TAKEN_CODES = {"email_exists", "user_already_exists"}


class SupabaseIdentity:
    """
    Supabase Auth gateway: account creation and password sign-in.

    Supabase owns passwords and issues the access tokens that
    `app.core.auth` verifies. This backend only mirrors a profile
    row keyed by the Supabase user id.
    """

    def __init__(self, admin: Client, sign_in_client: Callable[[], Client]):
        self.admin = admin
        self.sign_in_client = sign_in_client

    def register(self, email: str, password: str) -> uuid.UUID:
        """
        Create a confirmed account and return its user id.

        Raises:
            EmailTakenError: if Supabase already has the email.
            ValidationError: if Supabase rejects the password or email.
            IdentityError: for any other Supabase failure.
        """
        try:
            response = self.admin.auth.admin.create_user(
                {"email": email, "password": password, "email_confirm": True}
            )
        except AuthApiError as e:
            if e.code in _EMAIL_TAKEN_CODES:
                raise EmailTakenError(email) from e
            if e.code == "weak_password" or e.status == 422:
                raise ValidationError(f"Sign-up rejected: {e}") from e
            raise IdentityError(f"sign-up failed: {e}") from e
        except Exception as e:
            raise IdentityError(f"sign-up failed: {e}") from e

        logger.info("Registered account %s", email)
        return uuid.UUID(str(response.user.id))

    def sign_in(self, email: str, password: str) -> tuple[uuid.UUID, str]:
        """
        Password sign-in.

        Returns:
            (user id, access token)

        Raises:
            AuthenticationError: on wrong credentials.
            IdentityError: for any other Supabase failure.
        """
        try:
            response = self.sign_in_client().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthApiError as e:
            if e.status in (400, 401):
                raise AuthenticationError("Invalid email or password") from e
            raise IdentityError(f"sign-in failed: {e}") from e
        except Exception as e:
            raise IdentityError(f"sign-in failed: {e}") from e

        if response.session is None or response.user is None:
            raise AuthenticationError("Invalid email or password")
        return uuid.UUID(str(response.user.id)), response.session.access_token
