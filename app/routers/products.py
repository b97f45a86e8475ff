# app/routers/products.py
from decimal import Decimal

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Query,
    Request,
    UploadFile,
    status,
)
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.schemas.product import (
    ProductCreate,
    ProductPage,
    ProductRead,
    ProductStockUpdate,
    ProductUpdate,
)
from app.schemas.upload import ImageUpload
from app.services.product_service import (
    DEFAULT_PAGE_SIZE,
    ProductService,
    normalize_pagination,
)

router = APIRouter(prefix="/products", tags=["Products"])


def get_product_service(request: Request) -> ProductService:
    """The service is built once in the app lifespan."""
    return request.app.state.product_service


def _to_upload(file: UploadFile | None) -> ImageUpload | None:
    if file is None or not file.filename:
        return None
    data = file.file.read()
    return ImageUpload(
        filename=file.filename,
        content_type=file.content_type or "",
        data=data,
        size=file.size if file.size is not None else len(data),
    )


# -------- Public endpoints --------


@router.get("", response_model=ProductPage)
def list_products(
    category: str | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    List products, newest first.

    - `category` filters by exact category label.
    - `page` is 1-based; `page_size` is clamped to 1..100.
    """
    items, total = service.list_products(
        session, category=category, page=page, page_size=page_size
    )
    page, page_size, _ = normalize_pagination(page, page_size)
    return ProductPage(
        items=[ProductRead.model_validate(p) for p in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/search", response_model=list[ProductRead])
def search_products(
    q: str = Query(min_length=1),
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Case-insensitive search in product names and descriptions.
    """
    return service.search_products(session, q, page=page, page_size=page_size)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Get a single product by id (served from cache when possible).
    """
    return service.get_product(session, product_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    name: str = Form(min_length=1, max_length=255),
    description: str = Form(""),
    price: Decimal = Form(ge=0),
    category: str = Form(min_length=1, max_length=100),
    stock: int = Form(0, ge=0),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Create a new product (admin only).

    - Multipart form; `image` is optional (JPEG, PNG, WEBP).
    """
    payload = ProductCreate(
        name=name,
        description=description,
        price=price,
        category=category,
        stock=stock,
    )
    return service.create_product(session, payload, _to_upload(image))


@router.put(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: int,
    name: str = Form(min_length=1, max_length=255),
    description: str = Form(""),
    price: Decimal = Form(ge=0),
    category: str = Form(min_length=1, max_length=100),
    stock: int = Form(0, ge=0),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Replace a product's fields (admin only).

    - Without `image` the current image is kept.
    - With `image` the old image is deleted once the update is saved.
    """
    payload = ProductUpdate(
        name=name,
        description=description,
        price=price,
        category=category,
        stock=stock,
    )
    return service.update_product(session, product_id, payload, _to_upload(image))


@router.patch(
    "/{product_id}/stock",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_stock(
    product_id: int,
    payload: ProductStockUpdate,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Set the stock count of a product (admin only).
    """
    return service.update_stock(session, product_id, payload.stock)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Delete a product and its image (admin only).
    """
    service.delete_product(session, product_id)
    return None
