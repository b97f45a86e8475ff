"""Fixtures for HTTP tests: the real app over SQLite and in-memory fakes."""

import uuid

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.user import User
from tests.fixtures.fakes import bearer


@pytest.fixture
def client(engine, service, cache, user_service):
    app.state.engine = engine
    app.state.cache = cache
    app.state.product_service = service
    app.state.user_service = user_service
    yield TestClient(app)


@pytest.fixture
def admin_user(db_session) -> User:
    user = User(id=uuid.uuid4(), email="staff@example.com", name="staff", role="admin")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin(admin_user) -> dict[str, str]:
    return bearer(admin_user.id, admin_user.email)


@pytest.fixture
def customer() -> dict[str, str]:
    """A token whose profile does not exist yet (provisioned on first use)."""
    return bearer(uuid.uuid4(), "buyer@example.com")
