# app/core/cache.py
import logging

import redis

from app.models.product import Product
from app.schemas.product import ProductRead

logger = logging.getLogger(__name__)


# --- Key builders ---


def product_key(product_id: int) -> str:
    return f"product:{product_id}"


def product_list_key(category: str | None = None) -> str:
    """
    Coarse list key: one entry per category, no page dimension.

        products:all         unfiltered list
        products:<category>  filtered list

    Catalog writes delete these keys. List reads always go to the
    database and never fill them.
    """
    if category:
        return f"products:{category}"
    return "products:all"


# --- Codec ---


def encode_product(product: Product) -> str:
    return ProductRead.model_validate(product).model_dump_json()


def decode_product(raw: str) -> Product:
    data = ProductRead.model_validate_json(raw)
    return Product(**data.model_dump())


# --- Cache ---


class ProductCache:
    """
    Best-effort Redis cache for product reads.

    The cache is never authoritative:
      - get() returns None on a miss *and* on any Redis error
      - set() / delete() log Redis errors and return normally

    A cache built with `client=None` (Redis disabled) is a permanent miss.
    """

    def __init__(self, client: redis.Redis | None, ttl_seconds: int):
        self._client = client
        self.ttl_seconds = ttl_seconds

    @property
    def is_enabled(self) -> bool:
        return self._client is not None

    def get(self, key: str) -> str | None:
        if self._client is None:
            return None
        try:
            return self._client.get(key)
        except redis.RedisError as e:
            logger.warning("Cache get failed for %s: %s", key, e)
            return None

    def set(self, key: str, value: str) -> None:
        if self._client is None:
            return
        try:
            self._client.setex(key, self.ttl_seconds, value)
        except redis.RedisError as e:
            logger.warning("Cache set failed for %s: %s", key, e)

    def delete(self, *keys: str) -> None:
        if self._client is None or not keys:
            return
        try:
            self._client.delete(*keys)
        except redis.RedisError as e:
            logger.warning("Cache delete failed for %s: %s", ", ".join(keys), e)

    def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.error("Cache health check failed: %s", e)
            return False

    def close(self) -> None:
        if self._client is None:
            return
        try:
            self._client.close()
        except redis.RedisError as e:
            logger.error("Error closing cache connection: %s", e)
        finally:
            self._client = None


def build_cache(url: str, enabled: bool, ttl_seconds: int, socket_timeout: float) -> ProductCache:
    """
    Create the product cache from settings.

    The Redis client connects lazily, so an unreachable server does not
    prevent startup; reads simply miss until it comes back.
    """
    if not enabled:
        logger.info("Redis cache is disabled, all reads go to the database")
        return ProductCache(None, ttl_seconds)

    client = redis.Redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
        health_check_interval=30,
    )
    logger.info("Redis cache configured (ttl=%ss)", ttl_seconds)
    return ProductCache(client, ttl_seconds)
