# app/repositories/user_repo.py
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.core.errors import ConflictError, DependencyError
from app.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def _save(self, session: Session, user: User, action: str) -> User:
        try:
            # callers may pass a detached copy of a stored row
            row = session.merge(user)
            session.flush()
            session.refresh(row)
            saved = User(**row.model_dump())
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise ConflictError(f"{action} failed: user already exists") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise DependencyError(f"{action} failed: {e}") from e
        return saved

    # ----- Reads -----

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        try:
            return session.get(User, user_id)
        except SQLAlchemyError as e:
            session.rollback()
            raise DependencyError(f"get user {user_id} failed: {e}") from e

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        try:
            return session.exec(stmt).first()
        except SQLAlchemyError as e:
            raise DependencyError(f"get user by email failed: {e}") from e

    def list_users(self, session: Session, skip: int = 0, limit: int = 50) -> list[User]:
        """Paginated user listing, oldest first."""
        stmt = select(User).order_by(User.created_at).offset(skip).limit(limit)
        try:
            return list(session.exec(stmt).all())
        except SQLAlchemyError as e:
            raise DependencyError(f"list users failed: {e}") from e

    # ----- Writes -----

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        return self._save(session, user, "create user")

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        return self._save(session, user, "update user")
