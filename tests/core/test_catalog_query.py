# tests/core/test_catalog_query.py
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from catalog_http_api.errors import ValidationError
from catalog_http_api.repositories.catalog_query import (
    Page,
    PageRequest,
    SearchCriteria,
    SortDirection,
    SortSpec,
)
from catalog_http_api.repositories.products import ProductsRepository

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def repo(session) -> ProductsRepository:
    repo = ProductsRepository(session)
    rows = [
        ("iPhone 15 Pro", "Phone with A17 chip", "999.99", "Electronics", 25),
        ("Phone Case", "Protective case", "19.99", "Accessories", 0),
        ("Yoga Mat", "Non-slip mat", "49.99", "Sports", 100),
        ("Canon EOS R6", "Mirrorless camera", "2499.99", "Electronics", 8),
        ("Mystery Box", None, "5.00", None, 3),
    ]
    for name, description, price, category, stock in rows:
        repo.create(
            name=name,
            description=description,
            price=Decimal(price),
            category=category,
            stock_quantity=stock,
            created_at=NOW,
        )
    session.commit()
    return repo


def _names(rows):
    return [row.name for row in rows]


class TestSortSpec:
    def test_defaults(self):
        spec = SortSpec.parse(None, None)
        assert spec == SortSpec("id", SortDirection.ASC)

    def test_direction_is_case_insensitive(self):
        assert SortSpec.parse("price", "DESC").direction is SortDirection.DESC

    def test_unknown_field_and_direction_are_both_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            SortSpec.parse("colour", "sideways")
        assert set(exc_info.value.errors) == {"sortBy", "sortDir"}

    def test_snake_case_alias_is_accepted(self):
        assert SortSpec.parse("stock_quantity", "asc").field == "stock_quantity"


class TestPageRequest:
    def test_offset(self):
        assert PageRequest(page=2, size=10).offset == 20

    @pytest.mark.parametrize("page, size, field", [(-1, 10, "page"), (0, 0, "size"), (0, 2001, "size")])
    def test_out_of_range_values_are_rejected(self, page, size, field):
        with pytest.raises(ValidationError) as exc_info:
            PageRequest(page=page, size=size).validate(2000)
        assert field in exc_info.value.errors

    def test_offset_beyond_integer_range_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            PageRequest(page=9999999999999999999, size=10).validate(2000)
        assert exc_info.value.errors == {"page": "Page index is too large"}


class TestPage:
    def test_metadata_for_first_of_three_pages(self):
        page = Page(items=list(range(10)), total_elements=25, page_number=0, page_size=10)
        assert page.total_pages == 3
        assert page.is_first and not page.is_last
        assert page.number_of_elements == 10

    def test_metadata_for_last_page(self):
        page = Page(items=list(range(5)), total_elements=25, page_number=2, page_size=10)
        assert page.is_last and not page.is_first

    def test_empty_result_is_both_first_and_last(self):
        page = Page(items=[], total_elements=0, page_number=0, page_size=10)
        assert page.total_pages == 0
        assert page.is_first and page.is_last and page.is_empty

    def test_map_keeps_metadata(self):
        page = Page(items=[1, 2], total_elements=12, page_number=1, page_size=2).map(str)
        assert page.items == ["1", "2"]
        assert (page.total_elements, page.page_number, page.page_size) == (12, 1, 2)


class TestSearch:
    def test_empty_criteria_returns_everything(self, repo):
        assert SearchCriteria().is_empty()
        assert len(repo.search(SearchCriteria())) == 5

    def test_name_is_case_insensitive_substring(self, repo):
        rows = repo.search(SearchCriteria(name="PHONE"), SortSpec())
        assert _names(rows) == ["iPhone 15 Pro", "Phone Case"]

    def test_name_wildcards_are_literal(self, repo):
        assert repo.search(SearchCriteria(name="%")) == []

    def test_category_is_exact(self, repo):
        assert _names(repo.search(SearchCriteria(category="Electronics"), SortSpec())) == [
            "iPhone 15 Pro",
            "Canon EOS R6",
        ]
        assert repo.search(SearchCriteria(category="electronics")) == []

    def test_price_bounds_are_inclusive(self, repo):
        rows = repo.search(
            SearchCriteria(min_price=Decimal("19.99"), max_price=Decimal("999.99")),
            SortSpec("price"),
        )
        assert _names(rows) == ["Phone Case", "Yoga Mat", "iPhone 15 Pro"]

    def test_inverted_price_range_is_empty(self, repo):
        assert repo.search(SearchCriteria(min_price=Decimal("100"), max_price=Decimal("50"))) == []

    def test_in_stock_excludes_zero_stock(self, repo):
        assert "Phone Case" not in _names(repo.search(SearchCriteria(in_stock=True)))

    def test_in_stock_false_imposes_no_constraint(self, repo):
        assert len(repo.search(SearchCriteria(in_stock=False))) == 5

    def test_criteria_are_anded(self, repo):
        rows = repo.search(SearchCriteria(name="phone", category="Electronics", in_stock=True))
        assert _names(rows) == ["iPhone 15 Pro"]

    def test_description_search(self, repo):
        assert _names(repo.search(SearchCriteria(description="CAMERA"))) == ["Canon EOS R6"]


class TestRepositoryQueries:
    def test_sort_descending_by_price(self, repo):
        rows = repo.list_all(SortSpec("price", SortDirection.DESC))
        assert rows[0].name == "Canon EOS R6"
        assert rows[-1].name == "Mystery Box"

    def test_categories_are_distinct_sorted_and_skip_null(self, repo):
        assert repo.categories() == ["Accessories", "Electronics", "Sports"]

    def test_count_with_criteria(self, repo):
        assert repo.count(SearchCriteria(category="Electronics")) == 2
        assert repo.count() == 5

    def test_low_stock(self, repo):
        assert _names(repo.low_stock()) == ["Phone Case", "Canon EOS R6", "Mystery Box"]

    def test_page_slices_with_total(self, repo):
        page = repo.page(PageRequest(page=1, size=2, sort=SortSpec("price")))
        assert _names(page.items) == ["Phone Case", "Yoga Mat"]
        assert page.total_elements == 5
        assert page.total_pages == 3

    def test_conditional_stock_update_refuses_to_overdraw(self, repo, session):
        product = repo.search(SearchCriteria(name="Mystery"))[0]
        assert not repo.apply_stock_delta(product.id, -4, max_stock=999999, updated_at=NOW)
        assert repo.apply_stock_delta(product.id, -3, max_stock=999999, updated_at=NOW)
        session.commit()
        assert repo.refresh(product).stock_quantity == 0

    def test_conditional_stock_update_respects_ceiling(self, repo):
        product = repo.search(SearchCriteria(name="Yoga"))[0]
        assert not repo.apply_stock_delta(product.id, 1, max_stock=100, updated_at=NOW)
