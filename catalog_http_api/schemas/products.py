"""
catalog_http_api/schemas/products.py

Pydantic models for the products HTTP API.

Request models only check types. Range and length rules are enforced by
the catalog service so that every violated field can be reported at once
and the same rules apply to non-HTTP callers.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import Field, computed_field

from catalog_http_api.db.models import LOW_STOCK_THRESHOLD

from .common import APIModel, Money, UtcDatetime


class ProductRequest(APIModel):
    """
    Payload for creating or fully replacing a product.
    """

    name: Optional[str] = Field(default=None, description="2 to 255 characters.")
    description: Optional[str] = Field(default=None, description="Up to 1000 characters.")
    price: Optional[Decimal] = Field(
        default=None,
        description="0.01 to 999999.99, at most two decimal places.",
    )
    category: Optional[str] = Field(default=None, description="Up to 100 characters.")
    stock_quantity: Optional[int] = Field(default=0, description="0 to 999999.")


class ProductRead(APIModel):
    """
    Product as returned by the API, including derived stock flags.
    """

    id: int
    name: str
    description: Optional[str] = None
    price: Money
    category: Optional[str] = None
    stock_quantity: int
    created_at: UtcDatetime
    updated_at: UtcDatetime

    @computed_field(alias="inStock")
    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0

    @computed_field(alias="lowStock")
    @property
    def low_stock(self) -> bool:
        return self.stock_quantity < LOW_STOCK_THRESHOLD

    @computed_field(alias="formattedPrice")
    @property
    def formatted_price(self) -> str:
        return f"${self.price:.2f}"


class ProductPage(APIModel):
    """
    One page of products plus the paging metadata the frontend table needs.
    """

    content: List[ProductRead] = Field(default_factory=list)
    total_elements: int
    total_pages: int
    number: int = Field(..., description="Zero-based index of this page.")
    size: int
    first: bool
    last: bool
    number_of_elements: int
    empty: bool


__all__ = ["ProductPage", "ProductRead", "ProductRequest"]
