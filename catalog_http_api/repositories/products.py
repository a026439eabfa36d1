# catalog_http_api/repositories/products.py

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import Select, select, update
from sqlalchemy.orm import Session

from ..db import models
from .catalog_query import (
    Page,
    PageRequest,
    SearchCriteria,
    SortSpec,
    build_categories_statement,
    build_count_statement,
    build_page_statement,
    build_search_statement,
)


class ProductsRepository:
    """
    Thin data-access layer around the Product model.

    Query shapes come from ``catalog_query``; this class only executes them.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def _scalars(self, stmt: Select[Any]) -> Sequence[models.Product]:
        return list(self.session.execute(stmt).scalars().all())

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get_by_id(self, product_id: int) -> Optional[models.Product]:
        if not 1 <= product_id <= models.MAX_ROW_ID:
            return None
        return self.session.get(models.Product, product_id)

    def list_all(self, sort: Optional[SortSpec] = None) -> Sequence[models.Product]:
        return self._scalars(build_search_statement(None, sort or SortSpec()))

    def search(
        self,
        criteria: SearchCriteria,
        sort: Optional[SortSpec] = None,
    ) -> Sequence[models.Product]:
        return self._scalars(build_search_statement(criteria, sort))

    def count(self, criteria: Optional[SearchCriteria] = None) -> int:
        return int(self.session.execute(build_count_statement(criteria)).scalar_one())

    def page(
        self,
        page_request: PageRequest,
        criteria: Optional[SearchCriteria] = None,
    ) -> Page[models.Product]:
        total = self.count(criteria)
        items = self._scalars(build_page_statement(page_request, criteria))
        return Page(
            items=list(items),
            total_elements=total,
            page_number=page_request.page,
            page_size=page_request.size,
        )

    def low_stock(self, threshold: int = models.LOW_STOCK_THRESHOLD) -> Sequence[models.Product]:
        stmt = (
            select(models.Product)
            .where(models.Product.stock_quantity < threshold)
            .order_by(models.Product.id)
        )
        return self._scalars(stmt)

    def categories(self) -> list[str]:
        return [row for row in self.session.execute(build_categories_statement()).scalars().all()]

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def create(
        self,
        *,
        name: str,
        description: Optional[str],
        price: Decimal,
        category: Optional[str],
        stock_quantity: int,
        created_at: datetime,
    ) -> models.Product:
        product = models.Product(
            name=name,
            description=description,
            price=price,
            category=category,
            stock_quantity=stock_quantity,
            created_at=created_at,
            updated_at=created_at,
        )
        self.session.add(product)
        self.session.flush()
        return product

    def replace(
        self,
        product: models.Product,
        *,
        name: str,
        description: Optional[str],
        price: Decimal,
        category: Optional[str],
        stock_quantity: int,
        updated_at: datetime,
    ) -> models.Product:
        product.name = name
        product.description = description
        product.price = price
        product.category = category
        product.stock_quantity = stock_quantity
        product.updated_at = updated_at
        self.session.add(product)
        self.session.flush()
        return product

    def apply_stock_delta(
        self,
        product_id: int,
        delta: int,
        *,
        max_stock: int,
        updated_at: datetime,
    ) -> bool:
        """
        Atomically add ``delta`` to the stock of ``product_id``.

        The UPDATE only matches when the result stays within
        ``[0, max_stock]``, so concurrent adjustments cannot overdraw stock.
        Returns True if a row was changed.
        """
        new_stock = models.Product.stock_quantity + delta
        stmt = (
            update(models.Product)
            .where(models.Product.id == product_id)
            .where(new_stock >= 0)
            .where(new_stock <= max_stock)
            .values(stock_quantity=new_stock, updated_at=updated_at)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def refresh(self, product: models.Product) -> models.Product:
        self.session.refresh(product)
        return product

    def delete(self, product: models.Product) -> None:
        self.session.delete(product)
        self.session.flush()


__all__ = ["ProductsRepository"]
