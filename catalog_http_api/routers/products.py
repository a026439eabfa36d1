# catalog_http_api/routers/products.py

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from catalog_http_api.db.session import get_db
from catalog_http_api.repositories.catalog_query import Page, SearchCriteria, SortDirection, SortSpec
from catalog_http_api.repositories.products import ProductsRepository
from catalog_http_api.schemas.common import ERROR_RESPONSES
from catalog_http_api.schemas.products import ProductPage, ProductRead, ProductRequest
from catalog_http_api.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["products"], responses=ERROR_RESPONSES)


def get_catalog_service(request: Request, session: Session = Depends(get_db)) -> CatalogService:
    """
    Dependency-injected factory for CatalogService.

    Tests can swap it with ``app.dependency_overrides``.
    """
    return CatalogService(
        ProductsRepository(session),
        page_size_max=request.app.state.settings.PAGE_SIZE_MAX,
    )


def _page_response(page: Page[ProductRead]) -> ProductPage:
    return ProductPage(
        content=page.items,
        total_elements=page.total_elements,
        total_pages=page.total_pages,
        number=page.page_number,
        size=page.page_size,
        first=page.is_first,
        last=page.is_last,
        number_of_elements=page.number_of_elements,
        empty=page.is_empty,
    )


# ---------------------------------------------------------------------------
# Collection reads. Static paths must be declared before "/{product_id}".
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=ProductPage,
    summary="List products (paginated)",
    description="Zero-based pages, sorted by any product field in either direction.",
)
def list_products(
    *,
    page: int = Query(0, description="Zero-based page index."),
    size: int = Query(10, description="Page size."),
    sort_by: str = Query("id", alias="sortBy"),
    sort_dir: str = Query("asc", alias="sortDir", description="asc or desc"),
    service: CatalogService = Depends(get_catalog_service),
) -> ProductPage:
    return _page_response(service.paginate(page, size, sort_by, sort_dir))


@router.get("/all", response_model=List[ProductRead], summary="List all products")
def list_all_products(*, service: CatalogService = Depends(get_catalog_service)) -> List[ProductRead]:
    return service.list_all()


@router.get(
    "/search",
    response_model=List[ProductRead],
    summary="Search products",
    description=(
        "Every supplied filter must match. Name is a case-insensitive substring, "
        "category is exact, price bounds are inclusive, inStock=true keeps only "
        "products with stock."
    ),
)
def search_products(
    *,
    name: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None, alias="minPrice"),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice"),
    in_stock: Optional[bool] = Query(None, alias="inStock"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_dir: Optional[str] = Query(None, alias="sortDir"),
    service: CatalogService = Depends(get_catalog_service),
) -> List[ProductRead]:
    criteria = SearchCriteria(
        name=name or None,
        category=category or None,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
    )
    sort = SortSpec.parse(sort_by, sort_dir) if sort_by or sort_dir else None
    return service.search(criteria, sort)


@router.get("/search/name", response_model=List[ProductRead], summary="Search by name")
def search_by_name(
    *,
    name: str = Query(...),
    service: CatalogService = Depends(get_catalog_service),
) -> List[ProductRead]:
    return service.search_by_name(name)


@router.get("/search/description", response_model=List[ProductRead], summary="Search by description")
def search_by_description(
    *,
    description: str = Query(...),
    service: CatalogService = Depends(get_catalog_service),
) -> List[ProductRead]:
    return service.search_by_description(description)


@router.get("/search/price", response_model=List[ProductRead], summary="Products within a price range")
def search_by_price(
    *,
    min_price: Decimal = Query(..., alias="minPrice"),
    max_price: Decimal = Query(..., alias="maxPrice"),
    service: CatalogService = Depends(get_catalog_service),
) -> List[ProductRead]:
    return service.by_price_range(min_price, max_price)


@router.get("/categories", response_model=List[str], summary="Distinct categories")
def list_categories(*, service: CatalogService = Depends(get_catalog_service)) -> List[str]:
    return service.categories()


@router.get("/category/{category}", response_model=List[ProductRead], summary="Products in a category")
def list_by_category(
    *,
    category: str,
    service: CatalogService = Depends(get_catalog_service),
) -> List[ProductRead]:
    return service.by_category(category)


@router.get("/count/{category}", response_model=int, summary="Count products in a category")
def count_by_category(
    *,
    category: str,
    service: CatalogService = Depends(get_catalog_service),
) -> int:
    return service.count_by_category(category)


@router.get("/low-stock", response_model=List[ProductRead], summary="Products below the low-stock threshold")
def list_low_stock(*, service: CatalogService = Depends(get_catalog_service)) -> List[ProductRead]:
    return service.low_stock()


@router.get("/in-stock", response_model=List[ProductRead], summary="Products with stock")
def list_in_stock(*, service: CatalogService = Depends(get_catalog_service)) -> List[ProductRead]:
    return service.in_stock()


@router.get("/sort/price-asc", response_model=List[ProductRead], summary="All products, cheapest first")
def sort_price_asc(*, service: CatalogService = Depends(get_catalog_service)) -> List[ProductRead]:
    return service.ordered_by_price(SortDirection.ASC)


@router.get("/sort/price-desc", response_model=List[ProductRead], summary="All products, most expensive first")
def sort_price_desc(*, service: CatalogService = Depends(get_catalog_service)) -> List[ProductRead]:
    return service.ordered_by_price(SortDirection.DESC)


@router.get("/sort/newest", response_model=List[ProductRead], summary="All products, newest first")
def sort_newest(*, service: CatalogService = Depends(get_catalog_service)) -> List[ProductRead]:
    return service.newest_first()


# ---------------------------------------------------------------------------
# Single product
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
def create_product(
    *,
    payload: ProductRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> ProductRead:
    return service.create(payload)


@router.get("/{product_id}", response_model=ProductRead, summary="Get a single product")
def get_product(
    *,
    product_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> ProductRead:
    return service.get(product_id)


@router.put("/{product_id}", response_model=ProductRead, summary="Replace a product")
def update_product(
    *,
    product_id: int,
    payload: ProductRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> ProductRead:
    return service.update(product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
)
def delete_product(
    *,
    product_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> None:
    service.delete(product_id)


@router.put(
    "/{product_id}/stock",
    response_model=ProductRead,
    summary="Adjust stock",
    description="Positive quantity adds stock, negative removes it. Zero is rejected.",
)
def update_stock(
    *,
    product_id: int,
    quantity: int = Query(..., description="Signed stock delta."),
    service: CatalogService = Depends(get_catalog_service),
) -> ProductRead:
    return service.adjust_stock(product_id, quantity)
