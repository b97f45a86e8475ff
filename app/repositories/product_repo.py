# app/repositories/product_repo.py
from datetime import datetime, timezone

from sqlalchemy import delete, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from app.core.errors import DependencyError, ProductNotFoundError
from app.models.product import Product, utcnow


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no cache, no storage.
    - SQLAlchemy failures roll the session back and surface as DependencyError.
    - Writes return a detached copy loaded before the commit, so nothing
      touches the database once the commit has succeeded.
    """

    def _get(self, session: Session, product_id: int) -> Product | None:
        try:
            return session.get(Product, product_id)
        except SQLAlchemyError as e:
            session.rollback()
            raise DependencyError(f"get product {product_id} failed: {e}") from e

    def _save(self, session: Session, row: Product, action: str) -> Product:
        try:
            session.add(row)
            session.flush()
            session.refresh(row)
            saved = Product(**row.model_dump())
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise DependencyError(f"{action} failed: {e}") from e
        return saved

    # ----- Reads -----

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return self._get(session, product_id)

    def list_products(
        self,
        session: Session,
        category: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Product]:
        """Newest first, optionally filtered by exact category."""
        stmt = select(Product)
        if category:
            stmt = stmt.where(Product.category == category)
        stmt = (
            stmt.order_by(col(Product.created_at).desc(), col(Product.id).desc())
            .offset(offset)
            .limit(limit)
        )
        try:
            return list(session.exec(stmt).all())
        except SQLAlchemyError as e:
            raise DependencyError(f"list products failed: {e}") from e

    def count(self, session: Session, category: str | None = None) -> int:
        stmt = select(func.count()).select_from(Product)
        if category:
            stmt = stmt.where(Product.category == category)
        try:
            return session.exec(stmt).one()
        except SQLAlchemyError as e:
            raise DependencyError(f"count products failed: {e}") from e

    def search(
        self,
        session: Session,
        query: str,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Product]:
        """Case-insensitive substring match on name or description."""
        pattern = f"%{query}%"
        stmt = (
            select(Product)
            .where(
                or_(
                    col(Product.name).ilike(pattern),
                    col(Product.description).ilike(pattern),
                )
            )
            .order_by(col(Product.created_at).desc(), col(Product.id).desc())
            .offset(offset)
            .limit(limit)
        )
        try:
            return list(session.exec(stmt).all())
        except SQLAlchemyError as e:
            raise DependencyError(f"search products failed: {e}") from e

    # ----- Writes -----

    def create(self, session: Session, product: Product) -> Product:
        now = utcnow()
        product.created_at = now
        product.updated_at = now
        return self._save(session, product, "create product")

    def update(self, session: Session, product: Product) -> Product:
        """
        Copy the editable fields of `product` onto the stored row.

        Raises:
            ProductNotFoundError: if no row has product.id.
        """
        row = self._get(session, product.id)
        if row is None:
            raise ProductNotFoundError(product.id)

        row.name = product.name
        row.description = product.description
        row.price = product.price
        row.category = product.category
        row.stock = product.stock
        row.image_url = product.image_url
        _touch(row)

        return self._save(session, row, "update product")

    def update_stock(self, session: Session, product_id: int, stock: int) -> Product:
        row = self._get(session, product_id)
        if row is None:
            raise ProductNotFoundError(product_id)

        row.stock = stock
        _touch(row)

        return self._save(session, row, "update product stock")

    def delete(self, session: Session, product_id: int) -> int:
        """Delete by id and return the number of rows removed (0 or 1)."""
        stmt = delete(Product).where(col(Product.id) == product_id)
        try:
            result = session.execute(stmt)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise DependencyError(f"delete product failed: {e}") from e
        return result.rowcount


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _touch(row: Product) -> None:
    # updated_at never goes backwards, even if the clock does.
    row.updated_at = max(utcnow(), _aware(row.updated_at), _aware(row.created_at))
