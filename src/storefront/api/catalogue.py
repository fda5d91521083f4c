"""FastAPI routes for the catalogue: products, brands and categories.

Browsing is public. Creating, editing and removing anything, and the stock
reports, need an administrator.
"""

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.auth import require_admin
from storefront.api.paging import PageParams, page_params, paged
from storefront.api.schemas import (
    ERROR_RESPONSES,
    BrandPageResponse,
    BrandRequest,
    BrandResponse,
    CategoryPageResponse,
    CategoryRequest,
    CategoryResponse,
    CategoryTreeResponse,
    CreateProductRequest,
    ProductPageResponse,
    ProductResponse,
    UpdateBrandRequest,
    UpdateCategoryRequest,
    UpdateProductRequest,
)
from storefront.catalogue.brand import Brand
from storefront.catalogue.brand_management import CreateBrand, DeleteBrand, UpdateBrand, get_brand
from storefront.catalogue.category import Category, build_tree
from storefront.catalogue.category_management import CreateCategory, DeleteCategory, UpdateCategory, get_category
from storefront.catalogue.management import AddProduct, DeleteProduct, UpdateProduct
from storefront.catalogue.product import Product
from storefront.catalogue.stock import get_product
from storefront.identity.user import User


def _products():
    return current_domain.repository_for(Product)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"], responses=ERROR_RESPONSES)


def _product_response(product_id) -> ProductResponse:
    return ProductResponse.from_product(get_product(product_id))


@product_router.get("", response_model=ProductPageResponse)
async def list_products(
    paging: PageParams = Depends(page_params),
    sort: str | None = Query(None, description="name, price, stock_quantity or created_at; prefix with - to reverse"),
) -> ProductPageResponse:
    result = _products().page_active(paging.page, paging.size, sort)
    return paged(ProductPageResponse, result, ProductResponse.from_product)


@product_router.get("/search", response_model=ProductPageResponse)
async def search_products(term: str = Query(...), paging: PageParams = Depends(page_params)) -> ProductPageResponse:
    """Match on name, description, brand, model or SKU."""
    result = _products().search(term, paging.page, paging.size)
    return paged(ProductPageResponse, result, ProductResponse.from_product)


@product_router.get("/low-stock", response_model=ProductPageResponse)
async def list_low_stock(
    paging: PageParams = Depends(page_params), admin: User = Depends(require_admin)
) -> ProductPageResponse:
    result = _products().page_low_stock(paging.page, paging.size)
    return paged(ProductPageResponse, result, ProductResponse.from_product)


@product_router.get("/out-of-stock", response_model=ProductPageResponse)
async def list_out_of_stock(
    paging: PageParams = Depends(page_params), admin: User = Depends(require_admin)
) -> ProductPageResponse:
    result = _products().page_out_of_stock(paging.page, paging.size)
    return paged(ProductPageResponse, result, ProductResponse.from_product)


@product_router.get("/sku/{sku}", response_model=ProductResponse)
async def get_product_by_sku(sku: str) -> ProductResponse:
    product = _products().find_by_sku(sku)
    if product is None:
        raise ObjectNotFoundError({"sku": [f"Product not found with SKU: {sku}"]})
    return ProductResponse.from_product(product)


@product_router.get("/category/{category_id}", response_model=ProductPageResponse)
async def list_products_in_category(
    category_id: str,
    paging: PageParams = Depends(page_params),
    sort: str | None = Query(None),
) -> ProductPageResponse:
    get_category(category_id)
    result = _products().page_by_category(category_id, paging.page, paging.size, sort)
    return paged(ProductPageResponse, result, ProductResponse.from_product)


@product_router.get("/brand/{brand_id}", response_model=ProductPageResponse)
async def list_products_of_brand(
    brand_id: str,
    paging: PageParams = Depends(page_params),
    sort: str | None = Query(None),
) -> ProductPageResponse:
    get_brand(brand_id)
    result = _products().page_by_brand(brand_id, paging.page, paging.size, sort)
    return paged(ProductPageResponse, result, ProductResponse.from_product)


@product_router.post("", status_code=201, response_model=ProductResponse)
async def add_product(body: CreateProductRequest, admin: User = Depends(require_admin)) -> ProductResponse:
    command = AddProduct(
        name=body.name,
        price=float(body.price),
        stock_quantity=body.stock_quantity,
        description=body.description,
        brand_id=body.brand_id,
        brand=body.brand,
        model=body.model,
        sku=body.sku,
        category_id=body.category_id,
        category=body.category,
        featured=body.featured,
        low_stock_threshold=body.low_stock_threshold,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return _product_response(product_id)


@product_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str, body: UpdateProductRequest, admin: User = Depends(require_admin)
) -> ProductResponse:
    changes = body.model_dump(exclude_none=True)
    if "price" in changes:
        changes["price"] = float(changes["price"])
    current_domain.process(UpdateProduct(product_id=product_id, **changes), asynchronous=False)
    return _product_response(product_id)


@product_router.put("/{product_id}/stock", response_model=ProductResponse)
async def set_stock(
    product_id: str, quantity: int = Query(..., ge=0), admin: User = Depends(require_admin)
) -> ProductResponse:
    current_domain.process(UpdateProduct(product_id=product_id, stock_quantity=quantity), asynchronous=False)
    return _product_response(product_id)


@product_router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: str, admin: User = Depends(require_admin)) -> None:
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product_details(product_id: str) -> ProductResponse:
    return _product_response(product_id)


# ---------------------------------------------------------------------------
# Brand Router
# ---------------------------------------------------------------------------
brand_router = APIRouter(prefix="/brands", tags=["brands"], responses=ERROR_RESPONSES)


def _brand_response(brand: Brand) -> BrandResponse:
    return BrandResponse.from_brand(brand, _products().count_for_brand(brand.id))


@brand_router.get("", response_model=BrandPageResponse)
async def list_brands(
    paging: PageParams = Depends(page_params), active_only: bool = Query(False)
) -> BrandPageResponse:
    result = current_domain.repository_for(Brand).page_all(paging.page, paging.size, active_only)
    return paged(BrandPageResponse, result, _brand_response)


@brand_router.get("/search", response_model=BrandPageResponse)
async def search_brands(term: str = Query(...), paging: PageParams = Depends(page_params)) -> BrandPageResponse:
    result = current_domain.repository_for(Brand).search(term, paging.page, paging.size)
    return paged(BrandPageResponse, result, _brand_response)


@brand_router.get("/{brand_id}", response_model=BrandResponse)
async def get_brand_details(brand_id: str) -> BrandResponse:
    return _brand_response(get_brand(brand_id))


@brand_router.post("", status_code=201, response_model=BrandResponse)
async def create_brand(body: BrandRequest, admin: User = Depends(require_admin)) -> BrandResponse:
    brand_id = current_domain.process(CreateBrand(**body.model_dump()), asynchronous=False)
    return _brand_response(get_brand(brand_id))


@brand_router.put("/{brand_id}", response_model=BrandResponse)
async def update_brand(brand_id: str, body: UpdateBrandRequest, admin: User = Depends(require_admin)) -> BrandResponse:
    command = UpdateBrand(brand_id=brand_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return _brand_response(get_brand(brand_id))


@brand_router.delete("/{brand_id}", status_code=204)
async def delete_brand(brand_id: str, admin: User = Depends(require_admin)) -> None:
    current_domain.process(DeleteBrand(brand_id=brand_id), asynchronous=False)


# ---------------------------------------------------------------------------
# Category Router
# ---------------------------------------------------------------------------
category_router = APIRouter(prefix="/categories", tags=["categories"], responses=ERROR_RESPONSES)


def _category_response(category: Category) -> CategoryResponse:
    parent_name = None
    if category.parent_category_id:
        parent = current_domain.repository_for(Category).get(category.parent_category_id)
        parent_name = parent.name
    return CategoryResponse.from_category(category, parent_name, _products().count_for_category(category.id))


@category_router.get("", response_model=CategoryPageResponse)
async def list_categories(paging: PageParams = Depends(page_params)) -> CategoryPageResponse:
    result = current_domain.repository_for(Category).page_all(paging.page, paging.size)
    return paged(CategoryPageResponse, result, _category_response)


@category_router.get("/root", response_model=list[CategoryResponse])
async def list_root_categories() -> list[CategoryResponse]:
    return [_category_response(c) for c in current_domain.repository_for(Category).roots()]


@category_router.get("/tree", response_model=list[CategoryTreeResponse])
async def category_tree() -> list[CategoryTreeResponse]:
    """The whole hierarchy, each node with its "Parent > Child" path and product count."""
    categories = current_domain.repository_for(Category).every()
    counts = {str(c.id): _products().count_for_category(c.id) for c in categories}
    return [CategoryTreeResponse.from_node(node) for node in build_tree(categories, counts)]


@category_router.get("/search", response_model=CategoryPageResponse)
async def search_categories(
    term: str = Query(...), paging: PageParams = Depends(page_params)
) -> CategoryPageResponse:
    result = current_domain.repository_for(Category).search(term, paging.page, paging.size)
    return paged(CategoryPageResponse, result, _category_response)


@category_router.get("/{category_id}", response_model=CategoryResponse)
async def get_category_details(category_id: str) -> CategoryResponse:
    return _category_response(get_category(category_id))


@category_router.get("/{category_id}/subcategories", response_model=list[CategoryResponse])
async def list_subcategories(category_id: str) -> list[CategoryResponse]:
    get_category(category_id)
    return [_category_response(c) for c in current_domain.repository_for(Category).children(category_id)]


@category_router.post("", status_code=201, response_model=CategoryResponse)
async def create_category(body: CategoryRequest, admin: User = Depends(require_admin)) -> CategoryResponse:
    category_id = current_domain.process(CreateCategory(**body.model_dump()), asynchronous=False)
    return _category_response(get_category(category_id))


@category_router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str, body: UpdateCategoryRequest, admin: User = Depends(require_admin)
) -> CategoryResponse:
    changes = body.model_dump(exclude_none=True)
    make_root = "parent_category_id" in body.model_fields_set and body.parent_category_id is None
    command = UpdateCategory(category_id=category_id, make_root=make_root, **changes)
    current_domain.process(command, asynchronous=False)
    return _category_response(get_category(category_id))


@category_router.delete("/{category_id}", status_code=204)
async def delete_category(category_id: str, admin: User = Depends(require_admin)) -> None:
    current_domain.process(DeleteCategory(category_id=category_id), asynchronous=False)
