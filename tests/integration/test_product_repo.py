"""Repository tests against an in-memory SQLite database."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.errors import DependencyError, ProductNotFoundError
from app.models.product import Product
from app.repositories.product_repo import ProductRepository


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def repo():
    return ProductRepository()


def new_product(name="Chair", category="Seating", **fields) -> Product:
    fields.setdefault("price", Decimal("99.50"))
    fields.setdefault("stock", 10)
    return Product(name=name, category=category, **fields)


def test_create_assigns_id_and_timestamps(session, repo):
    product = repo.create(session, new_product())

    assert product.id is not None and product.id > 0
    assert product.updated_at >= product.created_at
    assert repo.get_by_id(session, product.id).name == "Chair"


def test_get_unknown_returns_none(session, repo):
    assert repo.get_by_id(session, 123) is None


def test_update_changes_fields(session, repo):
    created = repo.create(session, new_product())
    created_at = created.created_at

    snapshot = new_product(name="Armchair", category="Lounge", stock=0, image_url="http://x/a.png")
    snapshot.id = created.id
    updated = repo.update(session, snapshot)

    assert updated.name == "Armchair"
    assert updated.category == "Lounge"
    assert updated.stock == 0
    assert updated.image_url == "http://x/a.png"
    assert updated.created_at == created_at
    assert updated.updated_at >= updated.created_at


def test_update_unknown_raises(session, repo):
    snapshot = new_product()
    snapshot.id = 999

    with pytest.raises(ProductNotFoundError):
        repo.update(session, snapshot)


def test_update_stock(session, repo):
    created = repo.create(session, new_product())

    assert repo.update_stock(session, created.id, 2).stock == 2

    with pytest.raises(ProductNotFoundError):
        repo.update_stock(session, 999, 2)


def test_delete_reports_rows_affected(session, repo):
    created = repo.create(session, new_product())

    assert repo.delete(session, created.id) == 1
    assert repo.delete(session, created.id) == 0
    assert repo.get_by_id(session, created.id) is None


def test_list_pages_newest_first(session, repo):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(45):
        created = repo.create(session, new_product(name=f"Chair {i}"))
        row = session.get(Product, created.id)
        row.created_at = base + timedelta(minutes=i)
        session.add(row)
    session.add(new_product(name="Desk", category="Tables", created_at=base))
    session.commit()

    first = repo.list_products(session, category="Seating", limit=20, offset=0)
    last = repo.list_products(session, category="Seating", limit=20, offset=40)

    assert [p.name for p in first[:2]] == ["Chair 44", "Chair 43"]
    assert [p.name for p in last] == [f"Chair {i}" for i in range(4, -1, -1)]
    assert repo.count(session, category="Seating") == 45
    assert repo.count(session) == 46


def test_search_matches_name_or_description_ignoring_case(session, repo):
    repo.create(session, new_product(name="Oak Table", category="Tables"))
    repo.create(session, new_product(name="Bench", description="Solid OAK bench"))
    repo.create(session, new_product(name="Lamp", category="Lighting"))

    names = {p.name for p in repo.search(session, "oak")}

    assert names == {"Oak Table", "Bench"}


def test_database_errors_surface_as_dependency_errors(session, repo):
    session.close()
    SQLModel.metadata.drop_all(session.get_bind())

    with pytest.raises(DependencyError):
        repo.count(session)


def test_lookup_on_broken_database_is_a_dependency_error(session, repo):
    session.close()
    SQLModel.metadata.drop_all(session.get_bind())

    with pytest.raises(DependencyError):
        repo.get_by_id(session, 1)


def test_create_on_broken_database_is_a_dependency_error(session, repo):
    session.close()
    SQLModel.metadata.drop_all(session.get_bind())

    with pytest.raises(DependencyError):
        repo.create(session, new_product())


def test_written_rows_are_usable_after_the_session_closes(session, repo):
    created = repo.create(session, new_product())
    updated = repo.update_stock(session, created.id, 4)
    session.close()

    assert created.name == "Chair"
    assert updated.stock == 4
    assert updated.price == Decimal("99.50")


def test_updated_at_never_moves_backwards(session, repo):
    created = repo.create(session, new_product())
    future = datetime(2100, 1, 1, tzinfo=timezone.utc)
    row = session.get(Product, created.id)
    row.updated_at = future
    session.add(row)
    session.commit()

    updated = repo.update_stock(session, created.id, 1)

    assert updated.updated_at.replace(tzinfo=timezone.utc) >= future
