# app/schemas/product.py
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, computed_field, field_validator
from sqlmodel import SQLModel, Field


class ProductBase(SQLModel):
    """
    Editable product fields shared by create/update payloads.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    description: str = ""
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: str = Field(max_length=100)
    stock: int = Field(default=0, ge=0)

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductCreate(ProductBase):
    """
    Payload for creating a product.

    The image travels separately as an optional upload.
    """


class ProductUpdate(ProductBase):
    """
    Full snapshot of the editable fields for an update.

    The target id comes from the path; the image URL is only
    changed by uploading a new image.
    """


class ProductStockUpdate(SQLModel):
    """
    Stock-only adjustment.
    """

    model_config = ConfigDict(extra="forbid")

    stock: int = Field(ge=0)


class ProductRead(SQLModel):
    """
    Product representation for clients (and the cache).
    """

    id: int
    name: str
    description: str
    price: Decimal
    category: str
    stock: int
    image_url: str | None = None
    created_at: datetime
    updated_at: datetime


class ProductPage(SQLModel):
    """
    One page of a product listing.
    """

    items: list[ProductRead]
    total: int
    page: int
    page_size: int

    @computed_field
    @property
    def has_more(self) -> bool:
        return self.total > 0 and self.page * self.page_size < self.total
