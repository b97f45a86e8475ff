# app/main.py
from contextlib import asynccontextmanager
import logging

import pydantic
from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.core import errors
from app.core.background import BackgroundRunner
from app.core.cache import build_cache
from app.core.config import get_settings
from app.core.identity import SupabaseIdentity
from app.core.storage import ImageStore
from app.core.supabase_client import supabase_admin, supabase_anon
from app.database import build_engine, create_db_and_tables
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.services.image_service import ImageService
from app.services.product_service import ProductService
from app.services.user_service import UserService

# Import models so SQLModel metadata is populated before create_all()
from app.models import product as _product_models  # noqa: F401
from app.models import user as _user_models  # noqa: F401

# Routers
from app.routers.auth import router as auth_router
from app.routers.products import router as products_router
from app.routers.users import router as users_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
      - Build cache, image store and background runner, and inject
        them into the product service.
      - Build the user service on top of Supabase Auth.

    Shutdown:
      - Drain background cache tasks, close Redis, dispose the engine.
    """
    logger.info("🔄 Startup: Connecting to Postgres...")
    engine = build_engine(settings.DATABASE_URL)
    try:
        create_db_and_tables(engine)
        logger.info("✅ Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"❌ Startup: DB connection FAILED: {e}")
        raise

    cache = build_cache(
        settings.REDIS_URL,
        enabled=settings.REDIS_ENABLED,
        ttl_seconds=settings.CACHE_TTL_SECONDS,
        socket_timeout=settings.CACHE_SOCKET_TIMEOUT,
    )
    background = BackgroundRunner.with_threads(settings.CACHE_LANES)
    images = ImageService(
        ImageStore(supabase_admin(), settings.STORAGE_BUCKET),
        max_bytes=settings.MAX_UPLOAD_BYTES,
        allowed_types=settings.ALLOWED_IMAGE_TYPES,
    )

    app.state.engine = engine
    app.state.cache = cache
    app.state.product_service = ProductService(
        ProductRepository(), images, cache, background
    )
    app.state.user_service = UserService(
        UserRepository(), SupabaseIdentity(supabase_admin(), supabase_anon)
    )

    yield

    logger.info("🛑 Shutdown: draining background tasks...")
    background.shutdown(wait=True)
    cache.close()
    engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME or "Furniture Shop API",
    version="0.1.0",
    lifespan=lifespan,
)


# --- Error mapping ---

_ERROR_STATUS: list[tuple[type[errors.CatalogError], int]] = [
    (errors.FileTooLargeError, 413),
    (errors.ValidationError, status.HTTP_400_BAD_REQUEST),
    (errors.AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (errors.NotFoundError, status.HTTP_404_NOT_FOUND),
    (errors.ConflictError, status.HTTP_409_CONFLICT),
    (errors.DependencyError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(exc: errors.CatalogError) -> int:
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(errors.CatalogError)
async def catalog_error_handler(request: Request, exc: errors.CatalogError):
    code = status_for(exc)
    if code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=code, content={"detail": str(exc)})


@app.exception_handler(pydantic.ValidationError)
async def payload_error_handler(request: Request, exc: pydantic.ValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(include_url=False, include_context=False)},
    )


# --- CORS configuration ---
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(auth_router, prefix=settings.API_V1_STR)
app.include_router(users_router, prefix=settings.API_V1_STR)
app.include_router(products_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Liveness endpoint."""
    return {"status": "ok", "service": "furniture-shop-backend"}


@app.get("/health")
def health(request: Request):
    """
    Dependency status.

    The cache is optional: a down cache reports "degraded",
    a down database reports "error".
    """
    database = "up"
    try:
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"❌ Health: database check failed: {e}")
        database = "down"

    product_cache = request.app.state.cache
    if not product_cache.is_enabled:
        cache = "disabled"
    else:
        cache = "up" if product_cache.ping() else "down"

    if database == "down":
        overall = "error"
    elif cache == "down":
        overall = "degraded"
    else:
        overall = "ok"
    return {"status": overall, "database": database, "cache": cache}
