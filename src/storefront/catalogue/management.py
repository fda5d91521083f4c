"""Catalogue management: commands and handler for adding, editing and removing products."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.brand_management import get_brand
from storefront.catalogue.category_management import get_category
from storefront.catalogue.product import Product
from storefront.catalogue.stock import get_product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


def _ensure_sku_free(sku, product_id=None):
    if not sku:
        return
    existing = current_domain.repository_for(Product).find_by_sku(sku)
    if existing is not None and str(existing.id) != str(product_id):
        raise ValidationError({"sku": ["SKU already exists"]})


def _labels(command) -> dict:
    """Brand and category names, taken from the linked aggregates when ids are given."""
    labels = {"brand": command.brand, "category": command.category}
    if command.brand_id:
        labels["brand"] = get_brand(command.brand_id).name
    if command.category_id:
        labels["category"] = get_category(command.category_id).name
    return labels


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=200)
    price = Float(required=True, min_value=0.01)
    stock_quantity = Integer(default=0, min_value=0)
    description = Text()
    brand_id = Identifier()
    brand = String(max_length=100)
    model = String(max_length=100)
    sku = String(max_length=50)
    category_id = Identifier()
    category = String(max_length=100)
    featured = Boolean(default=False)
    low_stock_threshold = Integer(default=10, min_value=0)


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id = Identifier(required=True)
    name = String(max_length=200)
    price = Float(min_value=0.01)
    stock_quantity = Integer(min_value=0)
    description = Text()
    brand_id = Identifier()
    brand = String(max_length=100)
    model = String(max_length=100)
    sku = String(max_length=50)
    category_id = Identifier()
    category = String(max_length=100)
    featured = Boolean()
    is_active = Boolean()
    low_stock_threshold = Integer(min_value=0)


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        _ensure_sku_free(command.sku)
        labels = _labels(command)

        product = Product.add(
            name=command.name,
            price=command.price,
            stock_quantity=command.stock_quantity or 0,
            description=command.description,
            brand_id=command.brand_id,
            brand=labels["brand"],
            model=command.model,
            sku=command.sku,
            category_id=command.category_id,
            category=labels["category"],
            featured=bool(command.featured),
            low_stock_threshold=command.low_stock_threshold if command.low_stock_threshold is not None else 10,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product added", product_id=str(product.id), sku=product.sku)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = get_product(command.product_id)
        if command.sku and command.sku != product.sku:
            _ensure_sku_free(command.sku, product.id)
        labels = _labels(command)

        product.update_details(
            name=command.name,
            price=command.price,
            stock_quantity=command.stock_quantity,
            description=command.description,
            brand_id=command.brand_id,
            brand=labels["brand"],
            model=command.model,
            sku=command.sku,
            category_id=command.category_id,
            category=labels["category"],
            featured=command.featured,
            is_active=command.is_active,
            low_stock_threshold=command.low_stock_threshold,
        )
        repo.add(product)
        logger.info("Product updated", product_id=str(product.id))

    @handle(DeleteProduct)
    def delete_product(self, command):
        # Orders keep their own snapshot of the product; carts report the line as invalid
        product = get_product(command.product_id)
        current_domain.repository_for(Product)._dao.delete(product)
        logger.info("Product deleted", product_id=str(product.id), sku=product.sku)
