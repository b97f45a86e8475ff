# app/services/product_service.py
import logging

from sqlmodel import Session

from app.core.background import BackgroundRunner
from app.core.cache import (
    ProductCache,
    decode_product,
    encode_product,
    product_key,
    product_list_key,
)
from app.core.errors import CatalogError, ProductNotFoundError
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductUpdate
from app.schemas.upload import ImageUpload
from app.services.image_service import ImageService

logger = logging.getLogger(__name__)


DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def normalize_pagination(page: int | None, page_size: int | None) -> tuple[int, int, int]:
    """
    Clamp paging input.

      - page      : >= 1 (default 1)
      - page_size : 1..100 (default 20)

    Returns:
        (page, page_size, offset)
    """
    page = max(page or 1, 1)
    if page_size is None:
        page_size = DEFAULT_PAGE_SIZE
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
    return page, page_size, (page - 1) * page_size


class ProductService:
    """
    Product catalog orchestration.

    Responsibilities:
      - image upload/delete around the database write, with compensation
      - read-through caching of single products
      - cache invalidation after every successful write

    Storage and database are two independent systems. There is no
    transaction across them: an upload that is followed by a failed
    write is undone by deleting the upload (best-effort). A crash in
    between leaves an orphaned object in the bucket.

    Concurrent updates of the same product are not serialized; the
    last write wins, and two concurrent image replacements may delete
    each other's new image.
    """

    def __init__(
        self,
        repo: ProductRepository,
        images: ImageService,
        cache: ProductCache,
        background: BackgroundRunner,
    ):
        self.repo = repo
        self.images = images
        self.cache = cache
        self.background = background

    # ----- Helpers -----

    def _discard_image(self, url: str | None, reason: str) -> None:
        """
        Best-effort delete: storage errors are logged, never raised.
        """
        if not url:
            return
        try:
            self.images.delete(url)
        except CatalogError as e:
            logger.warning("Could not delete image %s (%s): %s", url, reason, e)

    def _invalidate(self, *keys: str) -> None:
        # One task per key, on that key's lane, behind any pending fill.
        for key in dict.fromkeys(keys):
            self.background.submit(
                self.cache.delete, key, key=key, description=f"invalidate {key}"
            )

    def _invalidate_product(self, product_id: int, *categories: str) -> None:
        self._invalidate(
            product_key(product_id),
            product_list_key(),
            *(product_list_key(c) for c in categories),
        )

    # ----- Reads -----

    def get_product(self, session: Session, product_id: int) -> Product:
        """
        Read-through lookup.

        A cache hit never touches the database. On a miss the row is
        read and written back to the cache in the background.

        Raises:
            ProductNotFoundError: if the id is unknown.
        """
        key = product_key(product_id)

        raw = self.cache.get(key)
        if raw is not None:
            try:
                return decode_product(raw)
            except ValueError as e:
                logger.warning("Ignoring undecodable cache entry %s: %s", key, e)

        product = self.repo.get_by_id(session, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        self.background.submit(
            self.cache.set, key, encode_product(product), key=key, description=f"cache {key}"
        )
        return product

    def list_products(
        self,
        session: Session,
        category: str | None = None,
        page: int | None = 1,
        page_size: int | None = DEFAULT_PAGE_SIZE,
    ) -> tuple[list[Product], int]:
        """
        One page of products (newest first) plus the total for the filter.

        Always served from the database; the list keys are only
        invalidated by writes.
        """
        category = category or None
        _, page_size, offset = normalize_pagination(page, page_size)

        items = self.repo.list_products(session, category=category, limit=page_size, offset=offset)
        total = self.repo.count(session, category=category)

        return items, total

    def search_products(
        self,
        session: Session,
        query: str,
        page: int | None = 1,
        page_size: int | None = DEFAULT_PAGE_SIZE,
    ) -> list[Product]:
        """Substring search on name/description. Never cached."""
        _, page_size, offset = normalize_pagination(page, page_size)
        return self.repo.search(session, query.strip(), limit=page_size, offset=offset)

    # ----- Writes -----

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
        upload: ImageUpload | None = None,
    ) -> Product:
        """
        Create a product, optionally with an image.

        Order:
          1. validate + upload the image (nothing persisted on failure)
          2. insert the row; on failure delete the uploaded image
          3. invalidate the list keys for "all" and the category
        """
        image_url = self.images.upload(upload) if upload is not None else None

        product = Product(**payload.model_dump(), image_url=image_url)
        try:
            created = self.repo.create(session, product)
        except Exception:
            self._discard_image(image_url, "insert failed")
            raise

        logger.info("Created product %s in %r", created.id, created.category)
        self._invalidate(product_list_key(), product_list_key(created.category))
        return created

    def update_product(
        self,
        session: Session,
        product_id: int,
        payload: ProductUpdate,
        upload: ImageUpload | None = None,
    ) -> Product:
        """
        Replace the editable fields of a product, optionally its image.

        The old image is deleted only after the database write has
        committed. If the write fails, the newly uploaded image is
        deleted and the old one is left untouched.

        Raises:
            ProductNotFoundError: if the id is unknown.
        """
        current = self.repo.get_by_id(session, product_id)
        if current is None:
            raise ProductNotFoundError(product_id)

        old_image_url = current.image_url
        old_category = current.category
        created_at = current.created_at

        new_image_url = self.images.upload(upload) if upload is not None else None

        snapshot = Product(
            id=product_id,
            **payload.model_dump(),
            image_url=new_image_url or old_image_url,
            created_at=created_at,
        )
        try:
            updated = self.repo.update(session, snapshot)
        except Exception:
            self._discard_image(new_image_url, "update failed")
            raise

        if new_image_url and old_image_url and old_image_url != new_image_url:
            self._discard_image(old_image_url, "replaced")

        logger.info("Updated product %s", product_id)
        self._invalidate_product(product_id, old_category, updated.category)
        return updated

    def update_stock(self, session: Session, product_id: int, stock: int) -> Product:
        """
        Set the stock count of a product.

        Raises:
            ProductNotFoundError: if the id is unknown.
        """
        updated = self.repo.update_stock(session, product_id, stock)
        self._invalidate_product(product_id, updated.category)
        return updated

    def delete_product(self, session: Session, product_id: int) -> None:
        """
        Delete a product and its image.

        The image delete is best-effort: an orphaned object is better
        than a row that cannot be deleted.

        Raises:
            ProductNotFoundError: if the id is unknown, including when
                another request deleted it first.
        """
        product = self.repo.get_by_id(session, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        image_url = product.image_url
        category = product.category

        self._discard_image(image_url, "product deleted")

        if self.repo.delete(session, product_id) == 0:
            raise ProductNotFoundError(product_id)

        logger.info("Deleted product %s", product_id)
        self._invalidate_product(product_id, category)
