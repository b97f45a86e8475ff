"""Test configuration and shared fixtures."""

import os

# Settings are read at import time by app.main; give it a test environment.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "https://proj.supabase.co")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("REDIS_ENABLED", "false")

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.background import BackgroundRunner
from app.core.cache import ProductCache
from app.models import product as _product_models  # noqa: F401
from app.models import user as _user_models  # noqa: F401
from app.repositories.user_repo import UserRepository
from app.services.image_service import ImageService
from app.services.product_service import ProductService
from app.services.user_service import UserService
from tests.fixtures.fakes import (
    FakeIdentity,
    FakeImageStore,
    FakeRedis,
    FakeRepository,
    InlineExecutor,
)

ALLOWED_TYPES = ["image/jpeg", "image/png", "image/webp"]


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def call_log() -> list:
    """Ordered record of repository and storage calls."""
    return []


@pytest.fixture
def repo(call_log) -> FakeRepository:
    return FakeRepository(call_log)


@pytest.fixture
def store(call_log) -> FakeImageStore:
    return FakeImageStore(call_log)


@pytest.fixture
def redis_client() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(redis_client) -> ProductCache:
    return ProductCache(redis_client, ttl_seconds=1800)


@pytest.fixture
def service(repo, store, cache) -> ProductService:
    images = ImageService(store, max_bytes=1024, allowed_types=ALLOWED_TYPES)
    return ProductService(repo, images, cache, BackgroundRunner(InlineExecutor()))


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture
def user_service(identity) -> UserService:
    return UserService(UserRepository(), identity)
