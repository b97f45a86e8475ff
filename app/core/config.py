# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string)
      - SUPABASE_URL
      - JWT_SECRET (Supabase project JWT secret, verifies bearer tokens)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (image uploads, account sign-up)
      - SUPABASE_KEY (anon key, password sign-in)
      - REDIS_URL / REDIS_ENABLED (read-through cache)
    """

    PROJECT_NAME: str = "Furniture Shop API"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str

    # Supabase (Storage for product images, Auth for accounts)
    SUPABASE_URL: str
    SUPABASE_KEY: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET: str = "products"

    # JWT verification (backend-side)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    # Redis cache (single node, best-effort)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = True
    CACHE_TTL_SECONDS: int = 30 * 60
    CACHE_SOCKET_TIMEOUT: float = 0.5
    CACHE_LANES: int = 4  # single-thread lanes, one key always maps to one lane

    # Image uploads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB per image
    ALLOWED_IMAGE_TYPES: list[str] = ["image/jpeg", "image/png", "image/webp"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
