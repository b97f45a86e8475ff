# app/models/product.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(SQLModel, table=True):
    """
    Catalog entry for a piece of furniture.

    Invariants:
      - price >= 0, stock >= 0
      - updated_at >= created_at (both server-assigned)
      - image_url, when set, is a public URL in the product images bucket
    """

    __tablename__ = "products"

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Assigned by the database on insert",
    )

    name: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    description: str = Field(
        default="",
        description="Long description shown on the product page",
    )

    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=10,
        decimal_places=2,
        index=True,
        description="Unit price",
    )

    category: str = Field(
        max_length=100,
        index=True,
        description="Free-text category label (e.g. Seating)",
    )

    stock: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    image_url: str | None = Field(
        default=None,
        description="Public URL in Supabase Storage",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        index=True,
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        description="Last modification timestamp (UTC)",
    )
