"""Domain events for the catalogue: products, brands and categories."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue."""

    product_id = Identifier(required=True)
    name = String(required=True)
    sku = String()
    price = Float(required=True)
    stock_quantity = Integer(required=True)
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    is_active = Boolean()


@storefront.event(part_of="Product")
class StockAdjusted:
    """On-hand stock changed, either by checkout, cancellation or restock."""

    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reason = String(required=True, max_length=50)


@storefront.event(part_of="Brand")
class BrandCreated:
    brand_id = Identifier(required=True)
    name = String(required=True)
    country_of_origin = String()


@storefront.event(part_of="Brand")
class BrandUpdated:
    brand_id = Identifier(required=True)
    name = String(required=True)
    is_active = Boolean()


@storefront.event(part_of="Category")
class CategoryCreated:
    """A category was added, at the root or under a parent."""

    category_id = Identifier(required=True)
    name = String(required=True)
    parent_category_id = Identifier()
    level = Integer(required=True)


@storefront.event(part_of="Category")
class CategoryUpdated:
    category_id = Identifier(required=True)
    name = String(required=True)
    is_active = Boolean()


@storefront.event(part_of="Category")
class CategoryMoved:
    """A category was re-parented, or made a root."""

    category_id = Identifier(required=True)
    previous_parent_id = Identifier()
    parent_category_id = Identifier()
    level = Integer(required=True)
