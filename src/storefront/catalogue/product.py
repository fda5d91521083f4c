"""Product aggregate: the sellable item, its price and its on-hand stock.

Carts and orders never own products. They hold a product id and consult the
live aggregate for price, active flag and stock at the moment they need it.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.catalogue.events import ProductAdded, ProductDetailsUpdated, StockAdjusted
from storefront.domain import storefront
from storefront.shared.money import has_at_most_two_decimals, to_amount


class StockChangeReason:
    CHECKOUT = "checkout"
    ORDER_RELEASED = "order_released"
    MANUAL = "manual"


@storefront.aggregate
class Product:
    name = String(required=True, max_length=200)
    description = Text()
    price = Float(required=True, min_value=0.01)
    stock_quantity = Integer(default=0, min_value=0)
    low_stock_threshold = Integer(default=10, min_value=0)
    brand_id = Identifier()
    brand = String(max_length=100)
    model = String(max_length=100)
    sku = String(max_length=50)
    category_id = Identifier()
    category = String(max_length=100)
    featured = Boolean(default=False)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def price_must_have_at_most_two_decimals(self):
        if not has_at_most_two_decimals(self.price):
            raise ValidationError({"price": ["Price must have at most 2 decimal places"]})

    @classmethod
    def add(
        cls,
        name,
        price,
        stock_quantity=0,
        description=None,
        brand=None,
        model=None,
        sku=None,
        category=None,
        featured=False,
        low_stock_threshold=10,
        brand_id=None,
        category_id=None,
    ):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            price=to_amount(price),
            stock_quantity=stock_quantity,
            low_stock_threshold=low_stock_threshold,
            brand_id=brand_id,
            brand=brand,
            model=model,
            sku=sku,
            category_id=category_id,
            category=category,
            featured=featured,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                sku=sku,
                price=product.price,
                stock_quantity=stock_quantity,
                added_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Derived predicates
    # -------------------------------------------------------------------
    @property
    def is_in_stock(self) -> bool:
        return (self.stock_quantity or 0) > 0

    @property
    def is_low_stock(self) -> bool:
        return 0 < (self.stock_quantity or 0) <= (self.low_stock_threshold or 0)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply catalogue edits. Only the keys present in ``changes`` are touched.

        Stock is adjusted separately through :meth:`adjust_stock` so every
        change to it is recorded with a reason.
        """
        stock_quantity = changes.pop("stock_quantity", None)
        if "price" in changes and changes["price"] is not None:
            changes["price"] = to_amount(changes["price"])

        for field_name, value in changes.items():
            if value is not None:
                setattr(self, field_name, value)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                is_active=self.is_active,
            )
        )

        if stock_quantity is not None and stock_quantity != self.stock_quantity:
            self.adjust_stock(stock_quantity - self.stock_quantity, StockChangeReason.MANUAL)

    def adjust_stock(self, delta, reason):
        previous = self.stock_quantity or 0
        new_quantity = previous + delta
        if new_quantity < 0:
            raise ValidationError(
                {"stock_quantity": [f"Insufficient stock for {self.name}: {previous} available, {-delta} requested"]}
            )

        self.stock_quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                previous_quantity=previous,
                new_quantity=new_quantity,
                reason=reason,
            )
        )

    def deduct_stock(self, quantity):
        self.adjust_stock(-quantity, StockChangeReason.CHECKOUT)

    def restore_stock(self, quantity):
        self.adjust_stock(quantity, StockChangeReason.ORDER_RELEASED)
