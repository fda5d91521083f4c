"""Read-side view of a cart, recomputed against live product data.

Nothing here is stored: line validity and cart totals are derived from the
cart lines and the current state of each referenced product every time a
summary is built.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from storefront.cart.cart import Cart
from storefront.catalogue.stock import find_product, line_issue
from storefront.shared.money import line_total, to_decimal, total_of


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int
    product_name: str | None
    sku: str | None
    brand: str | None
    model: str | None
    unit_price: Decimal
    line_total: Decimal
    available_stock: int
    product_active: bool
    in_stock: bool
    quantity_available: bool
    validation_message: str | None

    @property
    def is_valid(self) -> bool:
        return self.validation_message is None


@dataclass(frozen=True)
class CartSummary:
    cart_id: str
    user_id: str
    lines: tuple[CartLine, ...]
    created_at: datetime | None
    updated_at: datetime | None

    @property
    def total_item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def unique_item_count(self) -> int:
        return len(self.lines)

    @property
    def total_amount(self) -> Decimal:
        """Monetary total over the lines that can still be bought."""
        return total_of(line.line_total for line in self.lines if line.is_valid)

    @property
    def has_invalid_items(self) -> bool:
        return any(not line.is_valid for line in self.lines)

    @property
    def invalid_lines(self) -> tuple[CartLine, ...]:
        return tuple(line for line in self.lines if not line.is_valid)


def _line(item) -> CartLine:
    product = find_product(item.product_id)
    issue = line_issue(product, item.quantity)

    if product is None:
        return CartLine(
            product_id=str(item.product_id),
            quantity=item.quantity,
            product_name=None,
            sku=None,
            brand=None,
            model=None,
            unit_price=to_decimal(0),
            line_total=to_decimal(0),
            available_stock=0,
            product_active=False,
            in_stock=False,
            quantity_available=False,
            validation_message=issue,
        )

    stock = product.stock_quantity or 0
    return CartLine(
        product_id=str(item.product_id),
        quantity=item.quantity,
        product_name=product.name,
        sku=product.sku,
        brand=product.brand,
        model=product.model,
        unit_price=to_decimal(product.price),
        line_total=line_total(product.price, item.quantity),
        available_stock=stock,
        product_active=bool(product.is_active),
        in_stock=product.is_in_stock,
        quantity_available=item.quantity <= stock,
        validation_message=issue,
    )


def summarize(cart: Cart) -> CartSummary:
    """Build the cart view, checking every line against its product."""
    return CartSummary(
        cart_id=str(cart.id),
        user_id=str(cart.user_id),
        lines=tuple(_line(item) for item in cart.items),
        created_at=cart.created_at,
        updated_at=cart.updated_at,
    )
