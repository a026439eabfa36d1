# catalog_http_api/services/catalog_service.py

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from catalog_http_api.errors import NotFoundError, ValidationError
from catalog_http_api.logging import get_logger
from catalog_http_api.repositories.catalog_query import (
    Page,
    PageRequest,
    SearchCriteria,
    SortDirection,
    SortSpec,
)
from catalog_http_api.repositories.products import ProductsRepository
from catalog_http_api.schemas.products import ProductRead, ProductRequest
from catalog_http_api.security.tokens import Clock, utcnow

logger = get_logger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000
CATEGORY_MAX_LENGTH = 100
PRICE_MIN = Decimal("0.01")
PRICE_MAX = Decimal("999999.99")
PRICE_SCALE = 2
STOCK_MAX = 999999
DEFAULT_PAGE_SIZE_MAX = 2000


@dataclass(frozen=True)
class ProductFields:
    """Validated, normalized values ready to be written."""

    name: str
    description: Optional[str]
    price: Decimal
    category: Optional[str]
    stock_quantity: int


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


def validate_product_request(payload: ProductRequest) -> ProductFields:
    """
    Check a product payload against the catalog rules.

    Every violated field is collected; a single ``ValidationError`` lists
    them all.
    """
    errors: Dict[str, str] = {}

    name = (payload.name or "").strip()
    if not name:
        errors["name"] = "Product name is required"
    elif not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        errors["name"] = (
            f"Product name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )

    description = _blank_to_none(payload.description)
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        errors["description"] = f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters"

    price = payload.price
    quantized: Optional[Decimal] = None
    if price is None:
        errors["price"] = "Price is required"
    else:
        try:
            finite = price.is_finite()
        except (AttributeError, InvalidOperation):
            finite = False
        if not finite:
            errors["price"] = "Price must be a number"
        elif price <= 0:
            errors["price"] = "Price must be greater than 0"
        elif price > PRICE_MAX:
            errors["price"] = "Price cannot exceed 999,999.99"
        elif price.normalize().as_tuple().exponent < -PRICE_SCALE or price < PRICE_MIN:
            errors["price"] = "Price must have up to 6 digits before decimal and 2 after"
        else:
            quantized = price.quantize(Decimal(1).scaleb(-PRICE_SCALE))

    category = _blank_to_none(payload.category)
    if category is not None and len(category) > CATEGORY_MAX_LENGTH:
        errors["category"] = f"Category cannot exceed {CATEGORY_MAX_LENGTH} characters"

    stock = payload.stock_quantity if payload.stock_quantity is not None else 0
    if stock < 0:
        errors["stockQuantity"] = "Stock quantity cannot be negative"
    elif stock > STOCK_MAX:
        errors["stockQuantity"] = "Stock quantity cannot exceed 999,999"

    if errors or quantized is None:
        raise ValidationError(errors=errors)

    return ProductFields(
        name=name,
        description=description,
        price=quantized,
        category=category,
        stock_quantity=stock,
    )


class CatalogService:
    """
    Product business rules on top of ``ProductsRepository``.

    Responsibilities:
    - Validate payloads eagerly, before anything reaches the database.
    - Assign created/updated timestamps at the point of mutation.
    - Keep stock inside [0, 999999].
    - Convert ORM rows to ``ProductRead``.
    """

    def __init__(
        self,
        repo: ProductsRepository,
        *,
        clock: Clock = utcnow,
        page_size_max: int = DEFAULT_PAGE_SIZE_MAX,
    ) -> None:
        self._repo = repo
        self._clock = clock
        self._page_size_max = page_size_max

    @staticmethod
    def _read(rows) -> List[ProductRead]:
        return [ProductRead.model_validate(row) for row in rows]

    def _require(self, product_id: int):
        product = self._repo.get_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product with id={product_id} not found.")
        return product

    # -------------------------------------------------------------------------
    # Core CRUD operations
    # -------------------------------------------------------------------------

    def create(self, payload: ProductRequest) -> ProductRead:
        fields = validate_product_request(payload)
        product = self._repo.create(
            name=fields.name,
            description=fields.description,
            price=fields.price,
            category=fields.category,
            stock_quantity=fields.stock_quantity,
            created_at=self._clock(),
        )
        self._repo.session.commit()
        logger.info("product_created", product_id=product.id, name=product.name)
        return ProductRead.model_validate(product)

    def get(self, product_id: int) -> ProductRead:
        return ProductRead.model_validate(self._require(product_id))

    def list_all(self) -> List[ProductRead]:
        return self._read(self._repo.list_all())

    def update(self, product_id: int, payload: ProductRequest) -> ProductRead:
        """
        Full replace of every mutable field.
        """
        product = self._require(product_id)
        fields = validate_product_request(payload)
        self._repo.replace(
            product,
            name=fields.name,
            description=fields.description,
            price=fields.price,
            category=fields.category,
            stock_quantity=fields.stock_quantity,
            updated_at=self._clock(),
        )
        self._repo.session.commit()
        logger.info("product_updated", product_id=product_id)
        return ProductRead.model_validate(product)

    def delete(self, product_id: int) -> None:
        product = self._require(product_id)
        self._repo.delete(product)
        self._repo.session.commit()
        logger.info("product_deleted", product_id=product_id)

    def adjust_stock(self, product_id: int, delta: int) -> ProductRead:
        """
        Add (delta > 0) or remove (delta < 0) stock.

        A zero delta is rejected. A decrease that would go below zero fails
        with "Insufficient stock" and leaves the stock untouched.
        """
        if delta == 0:
            raise ValidationError(
                errors={"quantity": "Quantity must be non-zero: positive to add stock, negative to remove it"}
            )

        product = self._require(product_id)
        self._check_stock_bounds(product.stock_quantity, delta)

        changed = self._repo.apply_stock_delta(
            product_id,
            delta,
            max_stock=STOCK_MAX,
            updated_at=self._clock(),
        )
        if not changed:
            # Lost a race with another writer; report against the fresh row.
            self._repo.session.rollback()
            current = self._require(product_id)
            self._repo.refresh(current)
            self._check_stock_bounds(current.stock_quantity, delta)
            raise ValidationError(errors={"quantity": "Stock changed concurrently, please retry"})

        self._repo.session.commit()
        self._repo.refresh(product)
        logger.info(
            "product_stock_adjusted",
            product_id=product_id,
            delta=delta,
            stock_quantity=product.stock_quantity,
        )
        return ProductRead.model_validate(product)

    @staticmethod
    def _check_stock_bounds(current: int, delta: int) -> None:
        if current + delta < 0:
            logger.warning("insufficient_stock", current=current, delta=delta)
            raise ValidationError(errors={"quantity": "Insufficient stock"})
        if current + delta > STOCK_MAX:
            raise ValidationError(errors={"quantity": "Stock quantity cannot exceed 999,999"})

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def search(self, criteria: SearchCriteria, sort: Optional[SortSpec] = None) -> List[ProductRead]:
        """
        AND together every present criterion. Without ``sort`` the order is
        whatever the database returns.
        """
        return self._read(self._repo.search(criteria, sort))

    def paginate(
        self,
        page: int = 0,
        size: int = 10,
        sort_field: Optional[str] = "id",
        sort_dir: Optional[str] = "asc",
    ) -> Page[ProductRead]:
        sort = SortSpec.parse(sort_field, sort_dir)
        page_request = PageRequest(page=page, size=size, sort=sort).validate(self._page_size_max)
        return self._repo.page(page_request).map(ProductRead.model_validate)

    def by_category(self, category: str) -> List[ProductRead]:
        return self.search(SearchCriteria(category=category), SortSpec())

    def search_by_name(self, name: str) -> List[ProductRead]:
        return self.search(SearchCriteria(name=name), SortSpec())

    def search_by_description(self, description: str) -> List[ProductRead]:
        return self.search(SearchCriteria(description=description), SortSpec())

    def by_price_range(self, min_price: Decimal, max_price: Decimal) -> List[ProductRead]:
        return self.search(SearchCriteria(min_price=min_price, max_price=max_price), SortSpec("price"))

    def in_stock(self) -> List[ProductRead]:
        return self.search(SearchCriteria(in_stock=True), SortSpec())

    def low_stock(self) -> List[ProductRead]:
        return self._read(self._repo.low_stock())

    def categories(self) -> List[str]:
        return self._repo.categories()

    def count_by_category(self, category: str) -> int:
        return self._repo.count(SearchCriteria(category=category))

    def ordered_by_price(self, direction: SortDirection = SortDirection.ASC) -> List[ProductRead]:
        return self._read(self._repo.list_all(SortSpec("price", direction)))

    def newest_first(self) -> List[ProductRead]:
        return self._read(self._repo.list_all(SortSpec("createdAt", SortDirection.DESC)))


__all__ = [
    "CatalogService",
    "ProductFields",
    "STOCK_MAX",
    "validate_product_request",
]
