# catalog_http_api/repositories/catalog_query.py

"""
Catalog query engine.

Translates structured search / sort / page requests into SQLAlchemy
statements over the ``products`` table. Nothing here touches a session;
the products repository executes what these helpers build.

    criteria = SearchCriteria(name="phone", max_price=Decimal("500"))
    stmt = build_search_statement(criteria, SortSpec.parse("price", "desc"))
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from sqlalchemy import Select, func, select

from catalog_http_api.db.models import MAX_ROW_ID, Product
from catalog_http_api.errors import ValidationError

T = TypeVar("T")
U = TypeVar("U")


# API field name (and snake_case alias) -> sortable column.
SORTABLE_FIELDS: Dict[str, Any] = {
    "id": Product.id,
    "name": Product.name,
    "description": Product.description,
    "price": Product.price,
    "category": Product.category,
    "stockQuantity": Product.stock_quantity,
    "stock_quantity": Product.stock_quantity,
    "createdAt": Product.created_at,
    "created_at": Product.created_at,
    "updatedAt": Product.updated_at,
    "updated_at": Product.updated_at,
}


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortSpec:
    field: str = "id"
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def parse(cls, field_name: Optional[str], direction: Optional[str]) -> "SortSpec":
        """
        Build a SortSpec from raw request values, collecting every problem
        into one ``ValidationError``.
        """
        errors: Dict[str, str] = {}
        name = (field_name or "id").strip()
        if name not in SORTABLE_FIELDS:
            allowed = ", ".join(sorted(k for k in SORTABLE_FIELDS if "_" not in k))
            errors["sortBy"] = f"Unknown sort field '{name}'. Allowed: {allowed}"

        raw_dir = (direction or "asc").strip().lower()
        try:
            parsed_dir = SortDirection(raw_dir)
        except ValueError:
            errors["sortDir"] = "Sort direction must be 'asc' or 'desc'"
            parsed_dir = SortDirection.ASC

        if errors:
            raise ValidationError(errors=errors)
        return cls(field=name, direction=parsed_dir)


@dataclass(frozen=True)
class SearchCriteria:
    """
    Partial search record; every present field is ANDed, absent fields
    impose no constraint.
    """

    name: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    in_stock: Optional[bool] = None
    description: Optional[str] = None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.name, self.category, self.min_price, self.max_price, self.in_stock, self.description)
        )


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = 10
    sort: SortSpec = field(default_factory=SortSpec)

    @property
    def offset(self) -> int:
        return self.page * self.size

    def validate(self, max_size: int) -> "PageRequest":
        errors: Dict[str, str] = {}
        if self.page < 0:
            errors["page"] = "Page index must not be less than zero"
        if self.size < 1:
            errors["size"] = "Page size must not be less than one"
        elif self.size > max_size:
            errors["size"] = f"Page size must not exceed {max_size}"
        if not errors and self.offset > MAX_ROW_ID:
            errors["page"] = "Page index is too large"
        if errors:
            raise ValidationError(errors=errors)
        return self


@dataclass
class Page(Generic[T]):
    items: List[T]
    total_elements: int
    page_number: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total_elements + self.page_size - 1) // self.page_size

    @property
    def is_first(self) -> bool:
        return self.page_number == 0

    @property
    def is_last(self) -> bool:
        return self.page_number >= self.total_pages - 1

    @property
    def number_of_elements(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def map(self, fn: Callable[[T], U]) -> "Page[U]":
        return Page(
            items=[fn(item) for item in self.items],
            total_elements=self.total_elements,
            page_number=self.page_number,
            page_size=self.page_size,
        )


# ---------------------------------------------------------------------------
# Statement builders
# ---------------------------------------------------------------------------


def resolve_sort_column(field_name: str) -> Any:
    try:
        return SORTABLE_FIELDS[field_name]
    except KeyError:
        raise ValidationError(errors={"sortBy": f"Unknown sort field '{field_name}'"}) from None


def apply_criteria(stmt: Select[Any], criteria: Optional[SearchCriteria]) -> Select[Any]:
    if criteria is None:
        return stmt
    if criteria.name:
        stmt = stmt.where(Product.name.icontains(criteria.name, autoescape=True))
    if criteria.description:
        stmt = stmt.where(Product.description.icontains(criteria.description, autoescape=True))
    if criteria.category is not None:
        stmt = stmt.where(Product.category == criteria.category)
    if criteria.min_price is not None:
        stmt = stmt.where(Product.price >= criteria.min_price)
    if criteria.max_price is not None:
        stmt = stmt.where(Product.price <= criteria.max_price)
    if criteria.in_stock:
        stmt = stmt.where(Product.stock_quantity > 0)
    return stmt


def apply_sort(stmt: Select[Any], sort: Optional[SortSpec]) -> Select[Any]:
    if sort is None:
        return stmt
    column = resolve_sort_column(sort.field)
    ordered = column.desc() if sort.direction is SortDirection.DESC else column.asc()
    if column is Product.id:
        return stmt.order_by(ordered)
    # Tie-break on id so pages never overlap.
    return stmt.order_by(ordered, Product.id.asc())


def build_search_statement(
    criteria: Optional[SearchCriteria] = None,
    sort: Optional[SortSpec] = None,
) -> Select[Any]:
    return apply_sort(apply_criteria(select(Product), criteria), sort)


def build_count_statement(criteria: Optional[SearchCriteria] = None) -> Select[Any]:
    return apply_criteria(select(func.count()).select_from(Product), criteria)


def build_page_statement(
    page_request: PageRequest,
    criteria: Optional[SearchCriteria] = None,
) -> Select[Any]:
    stmt = build_search_statement(criteria, page_request.sort)
    return stmt.offset(page_request.offset).limit(page_request.size)


def build_categories_statement() -> Select[Any]:
    return (
        select(Product.category)
        .where(Product.category.is_not(None))
        .distinct()
        .order_by(Product.category)
    )


__all__ = [
    "Page",
    "PageRequest",
    "SORTABLE_FIELDS",
    "SearchCriteria",
    "SortDirection",
    "SortSpec",
    "apply_criteria",
    "apply_sort",
    "build_categories_statement",
    "build_count_statement",
    "build_page_statement",
    "build_search_statement",
    "resolve_sort_column",
]
