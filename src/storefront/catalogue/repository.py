"""Repositories for the catalogue: product browsing, brand and category lookups.

Public listings only ever show active products. The stock reports are for
administrators and include inactive products too.
"""

from protean.exceptions import ValidationError

from storefront.catalogue.brand import Brand
from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.paging import Page, contains, page_of, scan, search_needle, slice_page

PRODUCT_SORT_FIELDS = ("name", "price", "stock_quantity", "created_at")


def product_ordering(sort: str | None) -> str:
    """Validate a ``sort`` parameter such as ``price`` or ``-created_at``."""
    if not sort:
        return "name"
    field_name = sort.removeprefix("-")
    if field_name not in PRODUCT_SORT_FIELDS:
        allowed = ", ".join(PRODUCT_SORT_FIELDS)
        raise ValidationError({"sort": [f"Cannot sort by '{field_name}'. Use one of: {allowed}"]})
    return sort


def _same_name(name):
    wanted = (name or "").strip().lower()
    return lambda record: (record.name or "").strip().lower() == wanted


@storefront.repository(part_of=Product)
class ProductRepository:
    def find_by_sku(self, sku) -> Product | None:
        if not sku:
            return None
        result = self._dao.query.filter(sku=sku).all()
        return result.items[0] if result.items else None

    def _page(self, query, page, size, sort=None) -> Page:
        result = query.order_by(product_ordering(sort)).offset(page * size).limit(size).all()
        return page_of(result, page, size)

    def page_active(self, page: int, size: int, sort: str | None = None) -> Page:
        return self._page(self._dao.query.filter(is_active=True), page, size, sort)

    def page_by_category(self, category_id, page: int, size: int, sort: str | None = None) -> Page:
        return self._page(self._dao.query.filter(category_id=str(category_id), is_active=True), page, size, sort)

    def page_by_brand(self, brand_id, page: int, size: int, sort: str | None = None) -> Page:
        return self._page(self._dao.query.filter(brand_id=str(brand_id), is_active=True), page, size, sort)

    def search(self, term: str, page: int, size: int) -> Page:
        """Active products whose name, description, brand, model or SKU contain ``term``."""
        needle = search_needle(term)

        def matches(product):
            return contains(needle, product.name, product.description, product.brand, product.model, product.sku)

        query = self._dao.query.filter(is_active=True).order_by("name")
        return slice_page(scan(query, matches), page, size)

    def page_low_stock(self, page: int, size: int) -> Page:
        """In stock, but at or under the product's own threshold. Scarcest first."""
        low = scan(self._dao.query.order_by("stock_quantity"), lambda p: p.is_low_stock)
        return slice_page(low, page, size)

    def page_out_of_stock(self, page: int, size: int) -> Page:
        return self._page(self._dao.query.filter(stock_quantity=0), page, size)

    def for_brand(self, brand_id) -> list[Product]:
        return scan(self._dao.query.filter(brand_id=str(brand_id)), lambda p: True)

    def for_category(self, category_id) -> list[Product]:
        return scan(self._dao.query.filter(category_id=str(category_id)), lambda p: True)

    def count_for_brand(self, brand_id) -> int:
        return self._dao.query.filter(brand_id=str(brand_id)).all().total

    def count_for_category(self, category_id) -> int:
        return self._dao.query.filter(category_id=str(category_id)).all().total


@storefront.repository(part_of=Brand)
class BrandRepository:
    def find_by_name(self, name) -> Brand | None:
        found = scan(self._dao.query, _same_name(name))
        return found[0] if found else None

    def page_all(self, page: int, size: int, active_only: bool = False) -> Page:
        query = self._dao.query.filter(is_active=True) if active_only else self._dao.query
        result = query.order_by("name").offset(page * size).limit(size).all()
        return page_of(result, page, size)

    def search(self, term: str, page: int, size: int) -> Page:
        needle = search_needle(term)
        found = scan(
            self._dao.query.order_by("name"),
            lambda brand: contains(needle, brand.name, brand.description, brand.country_of_origin),
        )
        return slice_page(found, page, size)


@storefront.repository(part_of=Category)
class CategoryRepository:
    def find_by_name(self, name) -> Category | None:
        found = scan(self._dao.query, _same_name(name))
        return found[0] if found else None

    def every(self) -> list[Category]:
        return scan(self._dao.query.order_by("name"), lambda c: True)

    def roots(self) -> list[Category]:
        found = scan(self._dao.query.order_by("name"), lambda c: c.is_root)
        return sorted(found, key=lambda c: c.display_order or 0)

    def children(self, parent_id) -> list[Category]:
        found = scan(self._dao.query.filter(parent_category_id=str(parent_id)).order_by("name"), lambda c: True)
        return sorted(found, key=lambda c: c.display_order or 0)

    def page_all(self, page: int, size: int) -> Page:
        result = self._dao.query.order_by("name").offset(page * size).limit(size).all()
        return page_of(result, page, size)

    def search(self, term: str, page: int, size: int) -> Page:
        needle = search_needle(term)
        found = scan(
            self._dao.query.order_by("name"),
            lambda category: contains(needle, category.name, category.description),
        )
        return slice_page(found, page, size)
